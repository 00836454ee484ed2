"""
Product Catalog API Tests

Run with: pytest backend/products/tests/test_products_api_integration.py -v
"""
import pytest

from core_backend.errors import ValidationError
from products.models import Product
from products.services import ProductService


@pytest.mark.django_db
class TestMenu:

    def test_menu_lists_active_products(self, api_client, burger, fries):
        fries.archive()

        response = api_client.get("/api/products/menu/")

        assert response.status_code == 200
        assert [p["name"] for p in response.data] == ["Burger"]

    def test_menu_filter_by_category(self, api_client, burger, soda):
        response = api_client.get("/api/products/menu/?category=drinks")

        assert [p["name"] for p in response.data] == ["Soda"]


@pytest.mark.django_db
class TestPriceCart:

    def test_prices_come_from_catalog(self, burger):
        lines = ProductService.price_cart(
            [{"product_id": burger.id, "quantity": 2, "unit_price_cents": 1}]
        )

        assert lines[0].unit_price_cents == 4000
        assert lines[0].line_total_cents == 8000
        assert lines[0].category_id == burger.category_id

    def test_unknown_product(self, burger):
        with pytest.raises(ValidationError) as exc:
            ProductService.price_cart([{"product_id": 999999, "quantity": 1}])

        assert exc.value.details["unavailable_product_ids"] == [999999]

    def test_empty_cart(self):
        with pytest.raises(ValidationError):
            ProductService.price_cart([])


@pytest.mark.django_db
class TestAdminProducts:

    def test_admin_creates_product(self, admin_client, category):
        response = admin_client.post(
            "/api/admin/products/",
            {"name": "Salad", "price_cents": 1200, "category": category.slug},
            format="json",
        )

        assert response.status_code == 201, response.data
        assert Product.objects.get(name="Salad").category == category

    def test_delete_archives(self, admin_client, burger):
        response = admin_client.delete(f"/api/admin/products/{burger.id}/")

        assert response.status_code == 204
        burger.refresh_from_db()
        assert burger.is_active is False

    def test_staff_cannot_edit_catalog(self, staff_client):
        assert staff_client.get("/api/admin/products/").status_code == 403
