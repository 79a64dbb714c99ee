"""Shared fixtures."""

import random

import pytest

from app.core.config import get_settings
from app.services.language.profiles import get_language_registry


@pytest.fixture(scope="session")
def registry():
    return get_language_registry()


@pytest.fixture(scope="session")
def settings():
    return get_settings()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def english_text():
    """Plain English with a realistic letter distribution (315 letters)."""
    return (
        "IT WAS THE BEST OF TIMES AND IT WAS THE WORST OF TIMES. THE PEOPLE OF THE "
        "TOWN WOULD MEET EVERY MORNING IN THE MARKET TO TALK ABOUT THE WEATHER AND "
        "THE NEWS FROM THE CITY. NOBODY KNEW WHEN THE LETTER WOULD ARRIVE BUT "
        "EVERYONE AGREED THAT IT MUST BE IMPORTANT. WHEN THE RIDER FINALLY CAME "
        "THROUGH THE GATE THE WHOLE CROWD FOLLOWED HIM TO THE HOUSE OF THE MAYOR "
        "AND WAITED OUTSIDE FOR MANY HOURS."
    )


@pytest.fixture
def pangram_ciphertext():
    """'THE QUICK BROWN FOX JUMPS OVER THE LAZY DOG' shifted by 7."""
    return "AOL XBPJR IYVDU MVE QBTWZ VCLY AOL SHGF KVN"
