from fastapi import APIRouter, HTTPException, status

from app.core.exceptions import EngineNotFoundError, InvalidKeyError
from app.dependencies import SettingsDep, ensure_length
from app.models.schemas import EncryptRequest, EncryptResponse, ErrorResponse
from app.services.engines.registry import EngineRegistry

router = APIRouter()


@router.post(
    "",
    response_model=EncryptResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input or key"},
        404: {"model": ErrorResponse, "description": "Cipher type not supported"},
    },
    summary="Encrypt plaintext",
    description="Encrypt plaintext using a specified cipher type. Educational tool for generating test ciphertexts.",
)
def encrypt_plaintext(
    request: EncryptRequest,
    settings: SettingsDep,
) -> EncryptResponse:
    """
    Encrypt plaintext with a specified cipher type and key.

    This is an educational tool for generating ciphertexts to test
    the analysis and decryption capabilities.
    """
    ensure_length(request.plaintext, settings, label="Plaintext")

    try:
        engine = EngineRegistry().require(request.cipher_type)
        ciphertext = engine.encrypt(request.plaintext, request.key)
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

    return EncryptResponse(
        ciphertext=ciphertext,
        cipher_type=engine.cipher_type,
        key_used=request.key,
    )
