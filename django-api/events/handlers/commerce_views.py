"""Handlers for digital products, checkout, payments and sales analytics."""

from django.db import transaction
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from events import deps
from events.domain import DigitalProduct
from events.handlers.serializers import (
    CheckoutSerializer,
    PaymentSerializer,
    ProductInputSerializer,
    ProductSerializer,
    SalesAnalyticsSerializer,
    SalesReportSerializer,
)
from events.handlers.views import OrganizerView
from events.services.product_service import ProductChanges, ProductDraft

SIGNATURE_HEADER = "X-Razorpay-Signature"


class ProductOwnerMixin:
    def owned_product(self, request: Request, product_id: str) -> DigitalProduct:
        product = deps.product_service().get_product(product_id)
        self.owned_event(request, str(product.event_id))
        return product


class EventProductsView(OrganizerView):
    """Handler for GET/POST /api/events/{event_id}/products

    Listing is public so buyers can see what is on sale.
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return []
        return super().get_permissions()

    def get(self, request: Request, event_id: str) -> Response:
        products = deps.product_service().list_products(event_id)
        return Response(ProductSerializer(products, many=True).data)

    def post(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        serializer = ProductInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        draft = ProductDraft(
            name=data["name"],
            description=data.get("description") or None,
            price=data["price"],
            file_storage_id=data["file_storage_id"],
            file_name=data["file_name"],
            file_size=data["file_size"],
            file_type=data["file_type"],
        )
        with transaction.atomic():
            product = deps.product_service().create_product(event_id, draft, request.user.email)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)


class MyProductsView(OrganizerView):
    """Handler for GET /api/products/mine"""

    def get(self, request: Request) -> Response:
        products = deps.product_service().list_products_for_owner(request.user.email)
        return Response(ProductSerializer(products, many=True).data)


class ProductDetailView(ProductOwnerMixin, OrganizerView):
    """Handler for GET/PATCH/DELETE /api/products/{product_id}"""

    def get_permissions(self):
        if self.request.method == "GET":
            return []
        return super().get_permissions()

    def get(self, request: Request, product_id: str) -> Response:
        return Response(ProductSerializer(deps.product_service().get_product(product_id)).data)

    def patch(self, request: Request, product_id: str) -> Response:
        self.owned_product(request, product_id)
        serializer = ProductInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        changes = ProductChanges(**serializer.validated_data)
        with transaction.atomic():
            product = deps.product_service().update_product(product_id, changes)
        return Response(ProductSerializer(product).data)

    def delete(self, request: Request, product_id: str) -> Response:
        self.owned_product(request, product_id)
        with transaction.atomic():
            deps.product_service().delete_product(product_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProductSalesView(ProductOwnerMixin, OrganizerView):
    """Handler for GET /api/products/{product_id}/sales"""

    def get(self, request: Request, product_id: str) -> Response:
        self.owned_product(request, product_id)
        analytics = deps.sales_analytics_service().product_analytics(product_id)
        if analytics is None:
            return Response(None)
        return Response(SalesAnalyticsSerializer(analytics).data)


class CheckoutView(APIView):
    """Handler for POST /api/products/{product_id}/checkout"""

    def post(self, request: Request, product_id: str) -> Response:
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            result = deps.payment_service().generate_payment_link(
                product_id,
                serializer.validated_data["customer_name"],
                serializer.validated_data["customer_email"],
            )
        if not result.success:
            return Response({"success": False, "error": result.error})
        return Response(
            {
                "success": True,
                "payment_id": result.payment_id,
                "payment_link_url": result.payment_link_url,
            },
            status=status.HTTP_201_CREATED,
        )


class EventPaymentsView(OrganizerView):
    """Handler for GET /api/events/{event_id}/payments"""

    def get(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        payments = deps.payment_service().list_payments(event_id)
        return Response(PaymentSerializer(payments, many=True).data)


class PaymentDetailView(APIView):
    """Handler for GET /api/payments/{payment_id}"""

    def get(self, request: Request, payment_id: str) -> Response:
        payment = deps.payment_service().get_payment(payment_id)
        return Response(
            {
                "id": str(payment.id),
                "status": payment.status.value,
                "email_sent": payment.email_sent,
            }
        )


class PaymentVerifyView(APIView):
    """Handler for POST /api/payments/{payment_id}/verify"""

    def post(self, request: Request, payment_id: str) -> Response:
        with transaction.atomic():
            result = deps.payment_service().verify_payment(payment_id)
        return Response(
            {"success": result.success, "is_paid": result.is_paid, "status": result.status, "error": result.error}
        )


class PaymentCheckView(APIView):
    """Handler for POST /api/payments/{payment_id}/check"""

    def post(self, request: Request, payment_id: str) -> Response:
        with transaction.atomic():
            result = deps.payment_service().manual_payment_check(payment_id)
        return Response(
            {"success": result.success, "message": result.message, "payment_status": result.payment_status}
        )


class RazorpayWebhookView(APIView):
    """Handler for POST /api/webhooks/razorpay

    Unauthenticated; the signature header vouches for the body.
    """

    authentication_classes = []

    def post(self, request: Request) -> Response:
        with transaction.atomic():
            result = deps.payment_service().handle_webhook(
                request.body,
                request.headers.get(SIGNATURE_HEADER),
            )
        return Response({"success": result.success, "message": result.message})


class EventSalesView(OrganizerView):
    """Handler for GET /api/events/{event_id}/sales"""

    def get(self, request: Request, event_id: str) -> Response:
        self.owned_event(request, event_id)
        report = deps.sales_analytics_service().event_sales_report(event_id)
        return Response(SalesReportSerializer(report).data)


class MySalesView(OrganizerView):
    """Handler for GET /api/sales/mine"""

    def get(self, request: Request) -> Response:
        analytics = deps.sales_analytics_service().owner_analytics(request.user.email)
        return Response(SalesAnalyticsSerializer(analytics, many=True).data)
