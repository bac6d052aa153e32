"""Unit tests for main application entry point."""

import os
from unittest.mock import MagicMock, Mock, patch

import pytest
from fastapi import FastAPI

from src.main import create_application, get_admin_api_keys, get_dynamodb_resource, parse_csv_env


@pytest.mark.unit
class TestGetDynamoDBResource:
    """Tests for get_dynamodb_resource function."""

    @patch.dict(os.environ, {"DYNAMODB_ENDPOINT": "", "AWS_REGION": "us-west-2"}, clear=True)
    @patch("src.main.boto3.resource")
    def test_creates_aws_resource_when_no_endpoint(self, mock_boto3_resource: Mock) -> None:
        """Test that AWS DynamoDB resource is created when no local endpoint configured."""
        mock_resource = MagicMock()
        mock_boto3_resource.return_value = mock_resource

        result = get_dynamodb_resource()

        mock_boto3_resource.assert_called_once_with("dynamodb", region_name="us-west-2")
        assert result == mock_resource

    @patch.dict(
        os.environ,
        {"DYNAMODB_ENDPOINT": "http://localhost:8000", "AWS_REGION": "us-east-1"},
        clear=True,
    )
    @patch("src.main.boto3.resource")
    def test_creates_local_resource_when_endpoint_provided(self, mock_boto3_resource: Mock) -> None:
        """Test that local DynamoDB resource is created when endpoint configured."""
        get_dynamodb_resource()

        mock_boto3_resource.assert_called_once_with(
            "dynamodb",
            endpoint_url="http://localhost:8000",
            region_name="us-east-1",
            aws_access_key_id="dummy",
            aws_secret_access_key="dummy",
        )

    @patch.dict(os.environ, {"DYNAMODB_ENDPOINT": ""}, clear=True)
    @patch("src.main.boto3.resource")
    def test_uses_default_region_when_not_specified(self, mock_boto3_resource: Mock) -> None:
        """Test that default region us-east-1 is used when AWS_REGION not set."""
        get_dynamodb_resource()

        mock_boto3_resource.assert_called_once_with("dynamodb", region_name="us-east-1")


@pytest.mark.unit
class TestConfigHelpers:
    """Tests for environment parsing helpers."""

    @patch.dict(os.environ, {"CORS_ALLOW_ORIGINS": " http://a.test , ,http://b.test"}, clear=True)
    def test_parse_csv_env_trims_and_drops_blanks(self) -> None:
        """Test that CSV settings are split into clean values."""
        assert parse_csv_env("CORS_ALLOW_ORIGINS") == ["http://a.test", "http://b.test"]

    @patch.dict(os.environ, {}, clear=True)
    def test_parse_csv_env_missing_variable(self) -> None:
        """Test that an unset variable yields an empty list."""
        assert parse_csv_env("CORS_ALLOW_ORIGINS") == []

    @patch.dict(os.environ, {"ADMIN_API_KEY": "key-1,key-2"}, clear=True)
    def test_get_admin_api_keys(self) -> None:
        """Test that multiple admin keys are accepted."""
        assert get_admin_api_keys() == ["key-1", "key-2"]

    @patch.dict(os.environ, {}, clear=True)
    def test_get_admin_api_keys_falls_back_to_development_key(self) -> None:
        """Test the development fallback when no key is configured."""
        assert get_admin_api_keys() == ["dummy-key-for-development"]


@pytest.mark.unit
class TestCreateApplication:
    """Tests for create_application function."""

    @patch("src.main.setup_observability")
    @patch("src.main.configure_logging")
    @patch("src.main.get_dynamodb_resource")
    @patch("src.main.CartRepository")
    @patch("src.main.OrderRepository")
    @patch("src.main.CatalogRepository")
    @patch("src.main.create_app")
    @patch.dict(
        os.environ,
        {
            "LOG_LEVEL": "DEBUG",
            "DYNAMODB_CARTS_TABLE": "test-carts",
            "DYNAMODB_ORDERS_TABLE": "test-orders",
            "DYNAMODB_DISHES_TABLE": "test-dishes",
            "ADMIN_API_KEY": "test-admin-key-1,test-admin-key-2",
            "CORS_ALLOW_ORIGINS": "http://localhost:3000",
        },
        clear=True,
    )
    def test_creates_application_with_all_dependencies(
        self,
        mock_create_app: Mock,
        mock_catalog_repo: Mock,
        mock_order_repo: Mock,
        mock_cart_repo: Mock,
        mock_get_dynamodb: Mock,
        mock_configure_logging: Mock,
        mock_setup_observability: Mock,
    ) -> None:
        """Test that application is created with all dependencies properly wired."""
        mock_dynamodb = MagicMock()
        mock_get_dynamodb.return_value = mock_dynamodb
        mock_app = MagicMock(spec=FastAPI)
        mock_create_app.return_value = mock_app

        result = create_application()

        mock_configure_logging.assert_called_once_with("DEBUG")
        mock_cart_repo.assert_called_once_with(dynamodb_resource=mock_dynamodb, table_name="test-carts")
        mock_order_repo.assert_called_once_with(dynamodb_resource=mock_dynamodb, table_name="test-orders")
        mock_catalog_repo.assert_called_once_with(dynamodb_resource=mock_dynamodb, table_name="test-dishes")

        kwargs = mock_create_app.call_args.kwargs
        assert kwargs["api_keys"] == ["test-admin-key-1", "test-admin-key-2"]
        assert kwargs["cors_origins"] == ["http://localhost:3000"]
        assert kwargs["cart_service"].cart_repository is mock_cart_repo.return_value
        assert kwargs["order_service"].order_repository is mock_order_repo.return_value
        assert kwargs["catalog_service"].catalog_repository is mock_catalog_repo.return_value

        mock_setup_observability.assert_called_once_with(mock_app, enable_exporters=False)
        assert result == mock_app

    @patch("src.main.setup_observability")
    @patch("src.main.configure_logging")
    @patch("src.main.get_dynamodb_resource")
    @patch.dict(os.environ, {}, clear=True)
    def test_uses_default_table_names_and_any_origin(
        self,
        mock_get_dynamodb: Mock,
        mock_configure_logging: Mock,
        mock_setup_observability: Mock,
    ) -> None:
        """Test defaults when no environment is configured."""
        mock_get_dynamodb.return_value = MagicMock()

        app = create_application()

        assert app.state.cart_service.cart_repository.table_name == "storefront-carts"
        assert app.state.order_service.order_repository.table_name == "storefront-orders"
        assert app.state.catalog_service.catalog_repository.table_name == "storefront-dishes"
        mock_configure_logging.assert_called_once_with("INFO")
