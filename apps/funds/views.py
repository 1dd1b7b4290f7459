from rest_framework import viewsets, status, serializers as drf_serializers
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.serializers import UserMinimalSerializer
from .models import Fund
from .serializers import (
    FundSerializer,
    FundListSerializer,
    AllowanceSerializer,
    # Input serializers
    FundCreateSerializer,
    AllowanceCreateSerializer,
    AmountInputSerializer,
    AllowanceFilterSerializer,
    AllowanceActiveSerializer,
)
from .permissions import IsFundBenefactor, CanViewAllowance
from .services import (
    create_fund,
    deposit,
    create_allowance,
    get_allowance,
    get_fund_by_id,
    is_allowance_active,
    get_active_allowances,
    get_all_allowances,
    get_beneficiary_allowances,
    approve_allowance,
    withdraw_allowance,
    # Exceptions
    FundsServiceError,
    FundNotFoundError,
    AllowanceNotFoundError,
    AuthorizationError,
)


# Response serializers for API documentation
class ErrorResponseSerializer(drf_serializers.Serializer):
    error = drf_serializers.CharField()
    code = drf_serializers.CharField()


def service_error_response(exc):
    """Convert a funds service error into an HTTP response."""
    if isinstance(exc, (FundNotFoundError, AllowanceNotFoundError)):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, AuthorizationError):
        status_code = status.HTTP_403_FORBIDDEN
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return Response({'error': str(exc), 'code': exc.code}, status=status_code)


class FundPagination(PageNumberPagination):
    """Custom pagination for funds."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class FundViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for funds.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get all funds where the user is a benefactor
    create: Construct a fund with a fixed benefactor set
    retrieve: Get a specific fund (benefactors only)
    """

    serializer_class = FundSerializer
    lookup_value_regex = '[0-9a-fA-F-]{36}'
    permission_classes = [IsAuthenticated]
    pagination_class = FundPagination

    def get_queryset(self):
        """Return only funds where user is a benefactor."""
        return Fund.objects.filter(
            benefactor_memberships__user=self.request.user
        ).distinct()

    def get_serializer_class(self):
        if self.action == 'list':
            return FundListSerializer
        elif self.action == 'create':
            return FundCreateSerializer
        return FundSerializer

    def get_permissions(self):
        if self.action in ['retrieve', 'benefactors', 'allowances']:
            return [IsAuthenticated(), IsFundBenefactor()]
        return [IsAuthenticated()]

    @extend_schema(
        request=FundCreateSerializer,
        responses={201: FundSerializer, 400: ErrorResponseSerializer},
        tags=['funds'],
    )
    def create(self, request, *args, **kwargs):
        """Construct a new fund."""
        serializer = FundCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            fund = create_fund(
                name=serializer.validated_data['name'],
                benefactors=serializer.validated_data['benefactors'],
                maximum_allowance=serializer.validated_data['maximum_allowance'],
                created_by=request.user,
            )
        except FundsServiceError as e:
            return service_error_response(e)

        output_serializer = FundSerializer(fund, context={'request': request})
        return Response(output_serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def benefactors(self, request, pk=None):
        """Get the fund's benefactors in construction order."""
        fund = self.get_object()
        serializer = UserMinimalSerializer(fund.get_benefactors(), many=True)
        return Response(serializer.data)

    @extend_schema(
        request=AmountInputSerializer,
        responses={200: FundSerializer, 403: ErrorResponseSerializer},
        tags=['funds'],
    )
    @action(detail=True, methods=['post'])
    def deposit(self, request, pk=None):
        """Deposit value into the fund (benefactors only)."""
        serializer = AmountInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            fund = deposit(
                fund_id=pk,
                caller=request.user,
                amount=serializer.validated_data['amount'],
            )
        except FundsServiceError as e:
            return service_error_response(e)

        return Response(FundSerializer(fund, context={'request': request}).data)

    @extend_schema(
        request=AllowanceCreateSerializer,
        responses={200: AllowanceSerializer(many=True), 201: AllowanceSerializer},
        tags=['allowances'],
    )
    @action(detail=True, methods=['get', 'post'])
    def allowances(self, request, pk=None):
        """
        GET: list active allowances (``?status=all`` includes archived).
        POST: create an allowance.
        """
        fund = self.get_object()

        if request.method == 'GET':
            filter_serializer = AllowanceFilterSerializer(data=request.query_params)
            filter_serializer.is_valid(raise_exception=True)

            if filter_serializer.validated_data['status'] == 'all':
                allowances = get_all_allowances(fund_id=fund.id)
            else:
                allowances = get_active_allowances(fund_id=fund.id)
            return Response(AllowanceSerializer(allowances, many=True).data)

        serializer = AllowanceCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            allowance = create_allowance(
                fund_id=fund.id,
                amount=serializer.validated_data['amount'],
                beneficiary=serializer.validated_data['beneficiary'],
                required_approvals=serializer.validated_data['required_approvals'],
                caller=request.user,
            )
        except FundsServiceError as e:
            return service_error_response(e)

        return Response(AllowanceSerializer(allowance).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        responses={200: AllowanceSerializer(many=True)},
        description="Allowances the current user receives, across funds.",
        tags=['allowances'],
    )
    @action(detail=False, methods=['get'])
    def my_allowances(self, request):
        """Get allowances where the user is the beneficiary."""
        include_archived = request.query_params.get('status') == 'all'
        allowances = get_beneficiary_allowances(
            user=request.user,
            include_archived=include_archived,
        )
        return Response(AllowanceSerializer(allowances, many=True).data)


@extend_schema(
    responses={200: AllowanceSerializer, 403: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Get an allowance snapshot, active or archived.",
    tags=['allowances'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def allowance_detail(request, fund_id, number):
    """Get a single allowance (benefactors and its beneficiary)."""
    try:
        allowance = get_allowance(fund_id=fund_id, number=number)
    except FundsServiceError as e:
        return service_error_response(e)

    permission = CanViewAllowance()
    if not permission.has_object_permission(request, None, allowance):
        return Response({'error': permission.message}, status=status.HTTP_403_FORBIDDEN)

    return Response(AllowanceSerializer(allowance).data)


@extend_schema(
    responses={200: AllowanceActiveSerializer, 403: ErrorResponseSerializer, 404: ErrorResponseSerializer},
    description="Check whether an allowance is in the fund's active set.",
    tags=['allowances'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def allowance_active(request, fund_id, number):
    """Check allowance active status (benefactors and the beneficiary)."""
    try:
        fund = get_fund_by_id(fund_id=fund_id)
    except FundsServiceError as e:
        return service_error_response(e)

    is_beneficiary = fund.allowances.filter(number=number, beneficiary=request.user).exists()
    if not (is_beneficiary or fund.is_benefactor(request.user)):
        return Response(
            {'error': CanViewAllowance.message},
            status=status.HTTP_403_FORBIDDEN,
        )

    return Response({
        'id': number,
        'is_active': is_allowance_active(fund_id=fund_id, number=number),
    })


@extend_schema(
    request=None,
    responses={200: AllowanceSerializer, 400: ErrorResponseSerializer, 403: ErrorResponseSerializer},
    description="Approve an allowance as a benefactor.",
    tags=['allowances'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def approve(request, fund_id, number):
    """Approve an allowance."""
    try:
        allowance = approve_allowance(fund_id=fund_id, number=number, caller=request.user)
    except FundsServiceError as e:
        return service_error_response(e)

    return Response(AllowanceSerializer(allowance).data)


@extend_schema(
    request=AmountInputSerializer,
    responses={200: AllowanceSerializer, 400: ErrorResponseSerializer, 403: ErrorResponseSerializer},
    description="Withdraw from an unlocked allowance as its beneficiary.",
    tags=['allowances'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def withdraw(request, fund_id, number):
    """Withdraw from an allowance."""
    serializer = AmountInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        allowance = withdraw_allowance(
            fund_id=fund_id,
            number=number,
            amount=serializer.validated_data['amount'],
            caller=request.user,
        )
    except FundsServiceError as e:
        return service_error_response(e)

    return Response(AllowanceSerializer(allowance).data)
