"""
tests/core/parallel/test_parallel_decorators.py - 에러 분류 유틸리티 테스트
"""

import pytest
from botocore.exceptions import EndpointConnectionError

from conftest import create_mock_client_error
from core.exceptions import RemoteQueryError
from core.parallel.decorators import categorize_error, get_error_code
from core.parallel.types import ErrorCategory


class TestCategorizeError:
    """categorize_error 테스트"""

    @pytest.mark.parametrize(
        "code,expected",
        [
            ("Throttling", ErrorCategory.THROTTLING),
            ("ThrottlingException", ErrorCategory.THROTTLING),
            ("AccessDenied", ErrorCategory.ACCESS_DENIED),
            ("ResourceNotFoundException", ErrorCategory.NOT_FOUND),
            ("RequestTimeout", ErrorCategory.TIMEOUT),
            ("ExpiredToken", ErrorCategory.EXPIRED_TOKEN),
            ("InvalidParameterValue", ErrorCategory.INVALID_REQUEST),
            ("ValidationError", ErrorCategory.INVALID_REQUEST),
            ("InternalServiceError", ErrorCategory.SERVICE_ERROR),
            ("SomethingElse", ErrorCategory.UNKNOWN),
        ],
    )
    def test_client_error_codes(self, code, expected):
        assert categorize_error(create_mock_client_error(code)) == expected

    def test_remote_query_error(self):
        """래핑된 RemoteQueryError도 에러 코드로 분류"""
        error = RemoteQueryError("cloudwatch", "get_metric_statistics", "Throttling", "Rate exceeded")

        assert categorize_error(error) == ErrorCategory.THROTTLING

    def test_network_error(self):
        assert categorize_error(ConnectionResetError("reset")) == ErrorCategory.NETWORK

    def test_unknown_error(self):
        assert categorize_error(ValueError("bad")) == ErrorCategory.UNKNOWN


class TestGetErrorCode:
    """get_error_code 테스트"""

    def test_client_error(self):
        assert get_error_code(create_mock_client_error("Throttling")) == "Throttling"

    def test_remote_query_error(self):
        error = RemoteQueryError("ec2", "describe_instances", "UnauthorizedOperation")

        assert get_error_code(error) == "UnauthorizedOperation"

    def test_botocore_error(self):
        error = EndpointConnectionError(endpoint_url="https://ec2.us-east-1.amazonaws.com")

        assert get_error_code(error) == "EndpointConnectionError"

    def test_plain_exception(self):
        assert get_error_code(KeyError("x")) == "KeyError"
