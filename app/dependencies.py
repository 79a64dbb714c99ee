from typing import Annotated

from fastapi import Depends, HTTPException, status

from app.core.config import Settings, get_settings
from app.services.language.profiles import LanguageRegistry, get_language_registry


# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Shared language models and dictionaries
RegistryDep = Annotated[LanguageRegistry, Depends(get_language_registry)]


def ensure_length(text: str, settings: Settings, label: str = "Ciphertext") -> None:
    """Reject input longer than ``max_ciphertext_length`` with a 400."""
    if len(text) > settings.max_ciphertext_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{label} exceeds maximum length of {settings.max_ciphertext_length}",
        )
