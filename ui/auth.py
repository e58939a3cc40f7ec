import os
import secrets
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

basic_security = HTTPBasic(realm="flake")

DEFAULT_USERNAME = "admin"
DEFAULT_PASSWORD = "admin123"


def _expected_credentials():
    # read per request so the service picks up rotated credentials
    return (os.environ.get("API_USERNAME", DEFAULT_USERNAME),
            os.environ.get("API_PASSWORD", DEFAULT_PASSWORD))


def verify_basic_auth(credentials: HTTPBasicCredentials = Depends(basic_security)):
    username, password = _expected_credentials()
    correct_username = secrets.compare_digest(credentials.username.encode(), username.encode())
    correct_password = secrets.compare_digest(credentials.password.encode(), password.encode())
    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username
