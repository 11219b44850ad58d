from __future__ import annotations

from typing import List, Optional


class RecipeServiceError(Exception):
    code = "INTERNAL_ERROR"


class InputValidationError(RecipeServiceError):
    code = "VALIDATION_ERROR"

    def __init__(self, message: str = "Invalid input data", details: Optional[List[dict]] = None):
        super().__init__(message)
        self.details = details or []


class UpstreamGenerationError(RecipeServiceError):
    code = "UPSTREAM_GENERATION_FAILED"

    def __init__(self, message: str, persona: Optional[str] = None):
        super().__init__(message)
        self.persona = persona


class GenerationTimeoutError(UpstreamGenerationError):
    def __init__(self, timeout_seconds: float, persona: Optional[str] = None):
        super().__init__(f"Model call exceeded deadline of {timeout_seconds}s", persona=persona)
        self.timeout_seconds = timeout_seconds


class ParseRepairExhaustedError(RecipeServiceError):
    pass


class SanitizeRejectedError(RecipeServiceError):
    def __init__(self, reason: str):
        super().__init__(f"Draft rejected: {reason}")
        self.reason = reason


class AllGenerationsFailedError(RecipeServiceError):
    code = "ALL_GENERATIONS_FAILED"

    def __init__(self, errors: List[str]):
        super().__init__(f"All recipe generations failed: {'; '.join(errors)}")
        self.errors = errors


class RecipeNotFoundError(RecipeServiceError):
    code = "RECIPE_NOT_FOUND"

    def __init__(self, recipe_id: str):
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id


class PersistenceWriteError(RecipeServiceError):
    def __init__(self, operation: str, reason: str):
        super().__init__(f"Persistence error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason
