import pytest

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_cnpj_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "cnpj": "11.222.333/0001-81"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "11.222.333/0001-81" not in result["cnpj"]
        assert "***MASKED***" in result["cnpj"]

    def test_password_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "password='s3cret123'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "s3cret123" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_cookie_key_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "cookie_key=abc123xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123xyz" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_token_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "header": "token=abc123xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123xyz" not in result["header"]
        assert "***MASKED***" in result["header"]

    def test_non_sensitive_data_unchanged(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "customer.edit.committed", "error_code": "DUPLICATE_EMAIL"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["error_code"] == "DUPLICATE_EMAIL"
        assert result["event"] == "customer.edit.committed"
