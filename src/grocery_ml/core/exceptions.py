"""
Custom Exception Classes

Exceptions raised by the grocery_ml core. Expected failures (invalid datasets,
missing models) are reported through result objects instead; these cover the
cases where an operation cannot produce a result at all.
"""

from typing import Optional


class GroceryMLError(Exception):
    """Base class for grocery_ml errors."""

    def __init__(self, message: str = "An error occurred.") -> None:
        super().__init__(message)
        self.message = message


class ModelStoreError(GroceryMLError):
    """
    Exception raised when a model bundle cannot be persisted.

    Attributes:
        message (str): Explanation of the error
        model_id (Optional[str]): Identifier of the model being written
    """

    def __init__(
        self,
        message: str = "Failed to save model.",
        model_id: Optional[str] = None,
    ) -> None:
        if model_id:
            full_message = f"{message} Model: {model_id}"
        else:
            full_message = message
        super().__init__(full_message)
        self.message = message
        self.model_id = model_id


class ArchiveError(GroceryMLError):
    """Exception raised when a bundle cannot be packaged into a ZIP archive."""

    def __init__(self, message: str = "Failed to create ZIP file.") -> None:
        super().__init__(message)


class DatasetLoadError(GroceryMLError):
    """
    Exception raised when a training dataset cannot be read from disk.

    Attributes:
        message (str): Explanation of the error
        path (Optional[str]): The dataset path that failed to load
    """

    def __init__(self, message: str = "Failed to load dataset.", path: Optional[str] = None) -> None:
        if path:
            full_message = f"{message} Path: {path}"
        else:
            full_message = message
        super().__init__(full_message)
        self.message = message
        self.path = path
