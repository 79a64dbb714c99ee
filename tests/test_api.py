"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings, get_settings
from app.main import app

PREFIX = "/api/v1"


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestAnalyzeEndpoint:
    def test_analyze(self, client, pangram_ciphertext):
        response = client.post(f"{PREFIX}/analyze", json={"ciphertext": pangram_ciphertext})

        assert response.status_code == 200
        data = response.json()
        assert data["classification"]["candidates"]
        assert data["classification"]["stats"]["length"] == 35
        assert data["detected_language"]
        assert data["language_ranking"]

    def test_short_text(self, client):
        response = client.post(f"{PREFIX}/analyze", json={"ciphertext": "KHOOR"})

        assert response.status_code == 200
        assert response.json()["classification"]["candidates"][0]["type"] == "unknown"

    def test_empty_ciphertext_rejected(self, client):
        response = client.post(f"{PREFIX}/analyze", json={"ciphertext": ""})
        assert response.status_code == 422

    def test_unknown_language_rejected(self, client):
        response = client.post(f"{PREFIX}/analyze", json={"ciphertext": "KHOOR", "language": "klingon"})
        assert response.status_code == 422

    def test_oversized_input(self, client):
        """Test that input above the configured limit is rejected."""
        app.dependency_overrides[get_settings] = lambda: Settings(max_ciphertext_length=10)
        response = client.post(f"{PREFIX}/analyze", json={"ciphertext": "A" * 11})

        assert response.status_code == 400
        assert "maximum length" in response.json()["detail"]


class TestDecryptEndpoint:
    """Test suite for the decrypt endpoints."""

    def test_auto_decrypt(self, client, pangram_ciphertext):
        response = client.post(
            f"{PREFIX}/decrypt",
            json={"ciphertext": pangram_ciphertext, "language": "english"},
        )

        assert response.status_code == 200
        best = response.json()["best"]
        assert best["plaintext"] == "THE QUICK BROWN FOX JUMPS OVER THE LAZY DOG"
        assert best["key"] == 7
        assert best["cipher_type"] == "caesar-shift"

    def test_max_time_bounds(self, client, pangram_ciphertext):
        response = client.post(f"{PREFIX}/decrypt", json={"ciphertext": pangram_ciphertext, "max_time": 5})
        assert response.status_code == 422

    def test_keyed_keeps_layout(self, client):
        """Test that keyed decryption restores case and punctuation."""
        response = client.post(
            f"{PREFIX}/decrypt/keyed",
            json={"ciphertext": "Olssv, Dvysk!", "cipher_type": "caesar", "key": 7},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["plaintext"] == "Hello, World!"
        assert data["cipher_type"] == "caesar"
        assert data["key_used"] == 7

    def test_keyed_polybius(self, client):
        response = client.post(
            f"{PREFIX}/decrypt/keyed",
            json={"ciphertext": "23 15 31 31 34", "cipher_type": "polybius"},
        )

        assert response.status_code == 200
        assert response.json()["plaintext"] == "HELLO"

    def test_keyed_unknown_cipher(self, client):
        response = client.post(
            f"{PREFIX}/decrypt/keyed",
            json={"ciphertext": "KHOOR", "cipher_type": "enigma", "key": "ABC"},
        )
        assert response.status_code == 404

    def test_keyed_invalid_key(self, client):
        response = client.post(
            f"{PREFIX}/decrypt/keyed",
            json={"ciphertext": "KHOOR", "cipher_type": "vigenere", "key": "123"},
        )
        assert response.status_code == 400


class TestEncryptEndpoint:
    def test_encrypt(self, client):
        response = client.post(
            f"{PREFIX}/encrypt",
            json={"plaintext": "ATTACKATDAWN", "cipher_type": "vigenere", "key": "LEMON"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["ciphertext"] == "LXFOPVEFRNHR"
        assert data["cipher_type"] == "vigenere"

    def test_encrypt_invalid_key(self, client):
        response = client.post(
            f"{PREFIX}/encrypt",
            json={"plaintext": "HELLO", "cipher_type": "amsco", "key": "112"},
        )
        assert response.status_code == 400

    def test_encrypt_unknown_cipher(self, client):
        response = client.post(
            f"{PREFIX}/encrypt",
            json={"plaintext": "HELLO", "cipher_type": "playfair", "key": "KEY"},
        )
        assert response.status_code == 404


class TestLanguagesEndpoint:
    def test_list_languages(self, client):
        response = client.get(f"{PREFIX}/languages")

        assert response.status_code == 200
        languages = {item["language"]: item for item in response.json()}
        assert len(languages) == 8
        assert languages["english"]["has_model"]
        assert languages["english"]["has_dictionary"]
        assert languages["english"]["expected_ioc"] == pytest.approx(1.73)
        assert not languages["russian"]["has_model"]
        assert languages["russian"]["expected_ioc"] is None
