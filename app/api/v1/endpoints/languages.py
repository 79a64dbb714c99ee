from fastapi import APIRouter

from app.dependencies import RegistryDep
from app.models.schemas import Language, LanguageInfo

router = APIRouter()


@router.get(
    "",
    response_model=list[LanguageInfo],
    summary="List supported languages",
    description="Supported plaintext languages with the availability of their models and dictionaries.",
)
def list_languages(registry: RegistryDep) -> list[LanguageInfo]:
    languages = []
    for language in Language:
        has_model = registry.has_model(language)
        languages.append(
            LanguageInfo(
                language=language,
                has_model=has_model,
                has_dictionary=registry.has_dictionary(language),
                expected_ioc=registry.get(language).expected_ioc if has_model else None,
            )
        )
    return languages
