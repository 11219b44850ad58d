from __future__ import annotations
import time
import uuid

def make_recipe_id(index: int) -> str:
    """
    Generate a recipe ID from the current time and the persona's slot index.
    """
    return f"recipe-{int(time.time() * 1000)}-{index}-{uuid.uuid4().hex[:8]}"
