import re
from dataclasses import dataclass
from typing import ClassVar

from app.core.exceptions import ModelNotFoundError
from app.models.schemas import Language
from app.services.language.profiles import LanguageRegistry, get_language_registry
from app.services.preprocessing.normalizer import TextNormalizer


@dataclass
class PatternScore:
    """Breakdown of the short-text pattern score."""

    word_score: float
    word_count: int
    bigram_score: float
    trigram_score: float
    combined_score: float


class ShortTextPatterns:
    """
    Pattern scoring for short candidate plaintexts.

    Dictionary coverage is unreliable on a handful of words, so short
    candidates are also checked for ultra-frequent words and the most
    common bigrams and trigrams of the language.
    """

    COMMON_WORDS: ClassVar[dict[Language, frozenset[str]]] = {
        Language.ENGLISH: frozenset(
            "THE AND OF TO IN IS IT YOU THAT HE WAS FOR ON ARE AS WITH HIS THEY AT BE "
            "THIS HAVE FROM OR ONE HAD BY WORD BUT NOT WHAT ALL WERE WE WHEN YOUR CAN "
            "SAID THERE EACH WHICH SHE DO HOW THEIR IF WILL UP OTHER ABOUT OUT MANY "
            "THEN THEM THESE SO SOME HER WOULD MAKE LIKE INTO HIM TIME HAS LOOK TWO "
            "MORE GO SEE NO WAY COULD PEOPLE MY THAN FIRST BEEN WHO NOW FIND DOWN DAY "
            "DID GET COME MADE MAY PART".split()
        ),
        Language.SPANISH: frozenset(
            "EL LA DE QUE EN UN SER SE NO POR CON SU PARA COMO ESTAR TENER LE LO TODO "
            "PERO MAS HACER PODER DECIR ESTE IR OTRO ESE SI ME YA VER PORQUE DAR "
            "CUANDO MUY SIN VEZ MUCHO SABER SOBRE MI MISMO YO TAMBIEN HASTA DOS ENTRE "
            "ASI DESDE ESO NI NOS TIEMPO ELLA DIA UNO BIEN LOS LAS DEL UNA".split()
        ),
        Language.FRENCH: frozenset(
            "LE LA LES DE DES DU UN UNE ET EN EST QUE QUI IL ELLE NE PAS POUR DANS CE "
            "SUR AU AUX AVEC PAR SE SON SA SES PLUS NOUS VOUS ILS ON MAIS OU COMME "
            "TOUT FAIRE ETRE AVOIR CETTE BIEN AUSSI LEUR SANS".split()
        ),
        Language.GERMAN: frozenset(
            "DER DIE DAS UND IST ZU DEN VON MIT SICH DES AUF FUR NICHT EIN EINE ALS "
            "AUCH ES AN ER SO DEM IM SIE WIR WIE HAT ABER NACH BEI AUS WENN NUR NOCH "
            "ICH DASS WAR WIRD SIND KANN".split()
        ),
        Language.ITALIAN: frozenset(
            "IL LA DI CHE E UN UNA IN NON PER CON SI DEL DELLA LE LO GLI SONO COME "
            "MA ANCHE PIU SUO SUA QUESTO ERA HA AL ALLA DA NEL NELLA TUTTO LORO "
            "ESSERE FARE".split()
        ),
        Language.PORTUGUESE: frozenset(
            "O A OS AS DE DO DA DOS DAS QUE E EM UM UMA PARA COM NAO POR SE NO NA MAIS "
            "COMO MAS FOI AO ELE ELA SEU SUA OU SER QUANDO MUITO JA TAMBEM ESTA "
            "ISSO ENTRE".split()
        ),
    }

    TOP_NGRAMS: ClassVar[int] = 30

    def __init__(self, registry: LanguageRegistry | None = None):
        self.registry = registry or get_language_registry()

    def common_words(self, language: Language | str | None) -> frozenset[str]:
        try:
            lang = self.registry.coerce(language)
        except ModelNotFoundError:
            return frozenset()
        return self.COMMON_WORDS.get(lang, frozenset())

    def score(self, text: str, language: Language | str | None = None) -> PatternScore:
        """
        Score text by common words and common n-grams.

        Combined as 0.5 * word + 0.3 * trigram + 0.2 * bigram rate.
        """
        stripped = TextNormalizer.strip_diacritics(text).upper()
        cleaned = re.sub(r"[^A-Z\s]", "", stripped)

        words = [w for w in cleaned.split() if len(w) >= 2]
        common = self.common_words(language)
        word_score = sum(1 for w in words if w in common) / len(words) if words else 0.0

        letters = TextNormalizer.clean(cleaned)
        profile = self.registry.resolve(language)
        bigram_score = self._rate(letters, set(profile.top_ngrams(2, self.TOP_NGRAMS)), 2)
        trigram_score = self._rate(letters, set(profile.top_ngrams(3, self.TOP_NGRAMS)), 3)

        return PatternScore(
            word_score=word_score,
            word_count=len(words),
            bigram_score=bigram_score,
            trigram_score=trigram_score,
            combined_score=word_score * 0.5 + trigram_score * 0.3 + bigram_score * 0.2,
        )

    @staticmethod
    def _rate(letters: str, grams: set[str], n: int) -> float:
        total = len(letters) - n + 1
        if total <= 0:
            return 0.0
        hits = sum(1 for i in range(total) if letters[i:i + n] in grams)
        return hits / total
