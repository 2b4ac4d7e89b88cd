from enum import Enum


class NotificationType(str, Enum):
    MESSAGE = "message"
    TOURNAMENT = "tournament"
    ANNOUNCEMENT = "announcement"
    BOOKING = "booking"
    GENERAL = "general"
