"""Tests for exception utilities."""

import pytest
from fastapi import HTTPException, status

from finance_backup.utils.exceptions import raise_bad_request, raise_not_found, raise_too_large


def test_raise_not_found():
    """
    GIVEN a resource name
    WHEN raise_not_found is called
    THEN it should raise HTTPException with 404 status
    """
    with pytest.raises(HTTPException) as exc_info:
        raise_not_found("Export scope 'x'")

    assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND
    assert exc_info.value.detail == "Export scope 'x' not found"


def test_raise_not_found_with_cause():
    """
    GIVEN a resource name and a cause exception
    WHEN raise_not_found is called
    THEN it should raise HTTPException with the cause attached
    """
    cause = ValueError("Original error")

    with pytest.raises(HTTPException) as exc_info:
        raise_not_found("Export scope", cause=cause)

    assert exc_info.value.__cause__ is cause


def test_raise_bad_request():
    """
    GIVEN a detail message
    WHEN raise_bad_request is called
    THEN it should raise HTTPException with 400 status
    """
    with pytest.raises(HTTPException) as exc_info:
        raise_bad_request("Uploaded file is empty")

    assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST
    assert exc_info.value.detail == "Uploaded file is empty"


def test_raise_too_large():
    """
    GIVEN a detail message
    WHEN raise_too_large is called
    THEN it should raise HTTPException with 413 status
    """
    with pytest.raises(HTTPException) as exc_info:
        raise_too_large("File exceeds 50MB limit")

    assert exc_info.value.status_code == 413
    assert exc_info.value.detail == "File exceeds 50MB limit"
