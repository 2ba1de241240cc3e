from charity_api.utils.validation import Payload

MIN_PASSWORD_LENGTH = 8


def validate_register(body: dict) -> dict:
    p = Payload(body)
    p.string("name", required=True, min_len=2, max_len=100)
    p.email("email", required=True)
    p.string("password", required=True, min_len=MIN_PASSWORD_LENGTH, max_len=128)
    return p.raise_if_invalid()


def validate_login(body: dict) -> dict:
    p = Payload(body)
    p.email("email", required=True)
    p.string("password", required=True)
    return p.raise_if_invalid()


def validate_refresh(body: dict) -> dict:
    p = Payload(body)
    p.string("refreshToken", required=True, max_len=512)
    return p.raise_if_invalid()


def validate_google(body: dict) -> dict:
    p = Payload(body)
    p.string("idToken", required=True)
    p.string("nonce", max_len=256)
    return p.raise_if_invalid()


def validate_facebook(body: dict) -> dict:
    p = Payload(body)
    p.string("accessToken", required=True)
    return p.raise_if_invalid()
