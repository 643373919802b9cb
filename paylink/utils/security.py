# paylink/utils/security.py
import secrets
import base58

# base58 alphabet: mixed-case alphanumerics without 0, O, I and l
CODE_ALPHABET = base58.BITCOIN_ALPHABET.decode()

DOWNLOAD_TOKEN_BYTES = 32

def generate_unique_code(length: int = 10) -> str:
    """Draw a shareable payment link code from the system CSPRNG"""
    return ''.join(secrets.choice(CODE_ALPHABET) for _ in range(length))

def generate_download_token() -> str:
    """Mint a download token (64 hex characters)"""
    return secrets.token_hex(DOWNLOAD_TOKEN_BYTES)
