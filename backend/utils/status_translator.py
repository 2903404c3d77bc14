"""
Status Translator - Human readable labels for recording statuses
"""

# Stored status -> display label
STATUS_DISPLAY = {
    "ACTIVE": "Recording",
    "COMPLETED": "Completed",
    "FAILED": "Cancelled",
    "DELETED": "Deleted",
}


def translate_status(status: str) -> str:
    """
    Translate a stored status into the label shown to users.
    
    Args:
        status: Status as stored (ex: "ACTIVE", "COMPLETED")
    
    Returns:
        Display label (ex: "Recording", "Completed").
        Unknown statuses are returned unchanged.
    """
    return STATUS_DISPLAY.get(status, status)