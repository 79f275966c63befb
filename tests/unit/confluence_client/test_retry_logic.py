"""Unit tests for confluence_client.retry_logic module."""

import pytest
from unittest.mock import patch, MagicMock

from src.confluence_client.errors import APIAccessError, APIUnreachableError, RateLimitError
from src.confluence_client.retry_logic import (
    _is_rate_limit_error,
    retry_on_rate_limit,
    retry_on_transient_error,
)


class TestIsRateLimitError:
    """Test cases for _is_rate_limit_error function."""

    def test_detects_rate_limit_error_type(self):
        assert _is_rate_limit_error(RateLimitError("get_labels(1)")) is True

    def test_detects_429_in_message(self):
        assert _is_rate_limit_error(Exception("HTTP 429 Too Many Requests")) is True

    def test_detects_status_code_attribute(self):
        error = Exception("API error")
        error.status_code = 429
        assert _is_rate_limit_error(error) is True

    def test_detects_response_status_code_attribute(self):
        error = Exception("API error")
        error.response = MagicMock()
        error.response.status_code = 429
        assert _is_rate_limit_error(error) is True

    def test_ignores_incidental_rate_limit_wording(self):
        """Only specific phrases count, not any mention of rate limits."""
        assert _is_rate_limit_error(Exception("Not a rate limit error")) is False

    def test_returns_false_for_404_status_code(self):
        error = Exception("Not found")
        error.status_code = 404
        assert _is_rate_limit_error(error) is False


class TestRetryOnRateLimit:
    """Test cases for retry_on_rate_limit function."""

    def test_success_on_first_attempt(self):
        mock_func = MagicMock(return_value="success")
        result = retry_on_rate_limit(mock_func, "arg1", kwarg1="value1")

        assert result == "success"
        mock_func.assert_called_once_with("arg1", kwarg1="value1")

    @patch('time.sleep')
    def test_exponential_backoff_without_jitter(self, mock_sleep):
        """Delays double per retry: 1s, 2s, 4s."""
        rate_limit_error = RateLimitError("update_content(1)")
        mock_func = MagicMock(side_effect=[rate_limit_error] * 3 + ["success"])

        result = retry_on_rate_limit(mock_func, jitter=False)

        assert result == "success"
        assert mock_func.call_count == 4
        assert [c[0][0] for c in mock_sleep.call_args_list] == [1, 2, 4]

    @patch('random.uniform', return_value=1.5)
    @patch('time.sleep')
    def test_jitter_scales_delay(self, mock_sleep, mock_uniform):
        mock_func = MagicMock(side_effect=[Exception("429"), "success"])

        retry_on_rate_limit(mock_func, base_delay=2.0)

        mock_uniform.assert_called_once_with(0.5, 1.5)
        mock_sleep.assert_called_once_with(3.0)

    @patch('time.sleep')
    def test_raises_api_access_error_after_max_retries(self, mock_sleep):
        mock_func = MagicMock(side_effect=Exception("429 Too Many Requests"))

        with pytest.raises(APIAccessError) as exc_info:
            retry_on_rate_limit(mock_func)

        assert str(exc_info.value) == "Confluence API failure (after 3 retries)"
        assert mock_func.call_count == 4
        assert mock_sleep.call_count == 3

    def test_fails_fast_on_non_rate_limit_error(self):
        mock_func = MagicMock(side_effect=ValueError("Page not found"))

        with pytest.raises(ValueError):
            retry_on_rate_limit(mock_func)

        assert mock_func.call_count == 1


class TestRetryOnTransientError:
    """Test cases for retry_on_transient_error function."""

    @patch('time.sleep')
    def test_retries_unreachable_api(self, mock_sleep):
        unreachable = APIUnreachableError("https://example.atlassian.net")
        mock_func = MagicMock(side_effect=[unreachable, unreachable, {"id": "1"}])

        assert retry_on_transient_error(mock_func) == {"id": "1"}
        assert [c[0][0] for c in mock_sleep.call_args_list] == [1.0, 2.0]

    @patch('time.sleep')
    def test_reraises_after_last_attempt(self, mock_sleep):
        mock_func = MagicMock(side_effect=APIUnreachableError("https://example.atlassian.net"))

        with pytest.raises(APIUnreachableError):
            retry_on_transient_error(mock_func, max_retries=2)

        assert mock_func.call_count == 3

    @patch('time.sleep')
    def test_does_not_retry_rate_limits(self, mock_sleep):
        mock_func = MagicMock(side_effect=RateLimitError("get_labels(1)"))

        with pytest.raises(RateLimitError):
            retry_on_transient_error(mock_func)

        mock_sleep.assert_not_called()
