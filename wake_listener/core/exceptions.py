"""
Custom exceptions for the wake listener
"""


class WakeListenerError(Exception):
    """Base exception for wake listener errors"""
    pass


class ConfigurationError(WakeListenerError):
    """Raised when configuration is invalid or missing"""
    pass


class ContainerInitializationError(WakeListenerError):
    """Raised when dependency injection container fails to initialize"""
    pass


class CaptureInitError(WakeListenerError):
    """Raised when the capture resource cannot be acquired"""
    pass


class CaptureError(WakeListenerError):
    """Raised when reading from an open capture resource fails"""
    pass


class ModelLoadError(WakeListenerError):
    """Raised when a model artifact is missing or cannot be loaded"""
    pass


class InvalidInputError(WakeListenerError):
    """Raised when a window or tensor does not match the expected shape"""
    pass


class ExtractionError(WakeListenerError):
    """Raised when feature extraction hits a numeric failure"""
    pass


class InferenceError(WakeListenerError):
    """Raised when model inference returns unusable output"""
    pass
