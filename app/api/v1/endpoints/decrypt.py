import logging

from fastapi import APIRouter, HTTPException, status

from app.core.exceptions import DictionaryUnavailableError, EngineNotFoundError, InvalidKeyError
from app.dependencies import RegistryDep, SettingsDep, ensure_length
from app.models.schemas import (
    AutoDecryptRequest,
    AutoDecryptResult,
    ErrorResponse,
    KeyedDecryptRequest,
    KeyedDecryptResponse,
)
from app.services.engines.registry import EngineRegistry
from app.services.pipeline.orchestrator import AUTO, DecryptionOrchestrator
from app.services.preprocessing.normalizer import TextNormalizer

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=AutoDecryptResult,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        503: {"model": ErrorResponse, "description": "Dictionaries unavailable"},
    },
    summary="Automatically decrypt ciphertext",
    description=(
        "Identify the cipher family, run the matching attacks within the time "
        "budget and return the best validated plaintext."
    ),
)
def auto_decrypt(
    request: AutoDecryptRequest,
    settings: SettingsDep,
    registry: RegistryDep,
) -> AutoDecryptResult:
    """
    Decrypt ciphertext without a key.

    Failing to find a plaintext is not an error: the result then has
    method ``none`` and zero confidence.
    """
    ensure_length(request.ciphertext, settings)

    language = AUTO if request.detect_language else (request.language or settings.default_language)
    orchestrator = DecryptionOrchestrator(registry, settings)

    try:
        return orchestrator.auto_decrypt(
            request.ciphertext,
            try_multiple=request.try_multiple,
            max_time=request.max_time,
            use_dictionary=request.use_dictionary,
            language=language,
        )
    except DictionaryUnavailableError as e:
        logger.error("Auto-decryption needs dictionaries: %s", e.message)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=e.message,
        )


@router.post(
    "/keyed",
    response_model=KeyedDecryptResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input or key"},
        404: {"model": ErrorResponse, "description": "Cipher type not supported"},
    },
    summary="Decrypt with a known key",
    description="Decrypt ciphertext with a given cipher type and key, keeping its layout.",
)
def decrypt_with_key(
    request: KeyedDecryptRequest,
    settings: SettingsDep,
) -> KeyedDecryptResponse:
    """
    Decrypt ciphertext with a forced cipher type and key.

    Letter ciphers get the case, spacing and punctuation of the ciphertext
    back; ciphers that change the text's shape (Polybius, Baconian, ROT47)
    return their output as is.
    """
    ensure_length(request.ciphertext, settings)

    try:
        engine = EngineRegistry().require(request.cipher_type)
        plaintext = engine.decrypt(request.ciphertext, request.key)
    except EngineNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Cipher type '{request.cipher_type}' is not supported",
        ) from e
    except InvalidKeyError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message,
        ) from e

    if engine.preserves_layout:
        plaintext = TextNormalizer.match_layout(request.ciphertext, plaintext)

    return KeyedDecryptResponse(
        plaintext=plaintext,
        cipher_type=engine.cipher_type,
        key_used=request.key,
    )
