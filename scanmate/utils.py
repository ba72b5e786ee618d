"""
Utility functions for the ScanMate application
"""

import os
import platform
import time
from datetime import datetime


def ensure_directory(directory):
    """
    Create the specified directory if it doesn't exist

    Args:
        directory: Path to the directory to create
    """
    os.makedirs(directory, exist_ok=True)


def get_system_info():
    """
    Get information about the current system

    Returns:
        dict: System information
    """
    return {
        "platform": platform.platform(),
        "python_version": platform.python_version(),
        "architecture": platform.machine(),
        "system": platform.system()
    }


def timestamp():
    """Timestamp used to name scan sessions"""
    return datetime.now().strftime("%Y%m%d_%H%M%S_%f")


class Timer:
    def __init__(self):
        self.start_time = None

    def start(self):
        self.start_time = time.time()

    def stop(self) -> float:
        if self.start_time is None:
            return 0.0
        elapsed = time.time() - self.start_time
        self.start_time = None
        return elapsed
