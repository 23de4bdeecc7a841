from .local_gtfs_schedule_provider import LocalGtfsScheduleProvider
from .s3_gtfs_schedule_provider import S3GtfsScheduleProvider

__all__ = [
    "LocalGtfsScheduleProvider",
    "S3GtfsScheduleProvider",
]
