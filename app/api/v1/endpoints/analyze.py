import logging

from fastapi import APIRouter, HTTPException, status

from app.core.exceptions import CryptanalysisError
from app.dependencies import RegistryDep, SettingsDep, ensure_length
from app.models.schemas import AnalyzeRequest, AnalyzeResponse, ErrorResponse, LanguageScore
from app.services.language.detector import LanguageDetector
from app.services.pipeline.classifier import CipherClassifier

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=AnalyzeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        500: {"model": ErrorResponse, "description": "Analysis failed"},
    },
    summary="Analyze ciphertext",
    description=(
        "Classify the cipher family of a ciphertext and rank the likely "
        "plaintext languages. Nothing is decrypted."
    ),
)
def analyze_ciphertext(
    request: AnalyzeRequest,
    settings: SettingsDep,
    registry: RegistryDep,
) -> AnalyzeResponse:
    """
    Analyze ciphertext.

    1. Rank candidate languages (the requested one is promoted when competitive)
    2. Classify the cipher family with the resolved language
    3. Return the family ranking with its statistical features
    """
    ensure_length(request.ciphertext, settings)

    try:
        detection = LanguageDetector(registry, settings.language_detection).detect(
            request.ciphertext,
            request.language,
        )
        language = request.language or detection.language
        classification = CipherClassifier(registry, settings.classifier).identify(request.ciphertext, language)
    except CryptanalysisError as e:
        logger.error("Analysis failed: %s", e.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Analysis failed: {e.message}",
        )

    return AnalyzeResponse(
        classification=classification,
        detected_language=detection.language,
        language_ranking=[
            LanguageScore(language=lang, score=score) for lang, score in detection.ranking
        ],
    )
