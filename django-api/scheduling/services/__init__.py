from scheduling.services.booking_service import BookingService
from scheduling.services.schedule_service import ScheduleService

__all__ = ["BookingService", "ScheduleService"]
