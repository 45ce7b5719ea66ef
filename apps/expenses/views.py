from rest_framework import viewsets, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from .serializers import (
    ExpenseCreateSerializer,
    ExpenseUpdateSerializer,
    ExpenseSerializer,
    ExpenseShareSerializer,
    ExpenseSummarySerializer,
    UserDebtSerializer,
    SettlementPlanSerializer,
)
from apps.expenses.services import (
    create_expense,
    update_expense,
    delete_expense,
    get_expense,
    list_plan_expenses,
    settle_share,
    get_plan_expense_summary,
    get_user_debts,
    get_settlement_plan,
    # Exceptions
    LedgerValidationError,
    LedgerNotFoundError,
    LedgerPermissionError,
    LedgerConflictError,
)


class ExpensePagination(PageNumberPagination):
    """Custom pagination for expenses."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 50


class PlanExpenseViewSet(viewsets.GenericViewSet):
    """
    Expenses scoped to one plan.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Get the plan's expenses, newest first
    create: Add an expense paid by the current user
    summary: Totals and per-member balances
    debts: What the current user still owes, grouped by creditor
    settlements: Suggested transfers that settle the plan
    """

    permission_classes = [IsAuthenticated]
    pagination_class = ExpensePagination
    serializer_class = ExpenseSerializer

    def list(self, request, plan_id=None):
        try:
            expenses = list_plan_expenses(plan_id=plan_id, user=request.user)
        except LedgerNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except LedgerPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

        page = self.paginate_queryset(expenses)
        serializer = ExpenseSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @extend_schema(request=ExpenseCreateSerializer, responses={201: ExpenseSerializer})
    def create(self, request, plan_id=None):
        serializer = ExpenseCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            expense = create_expense(
                plan_id=plan_id,
                payer=request.user,
                title=data['title'],
                amount=data['amount'],
                split_type=data['split_type'],
                currency=data.get('currency'),
                description=data.get('description', ''),
                activity_id=data.get('activity_id'),
                receipt=data.get('receipt', ''),
                shares=data.get('shares'),
            )
        except LedgerValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except LedgerNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except LedgerPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except LedgerConflictError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: ExpenseSummarySerializer})
    def summary(self, request, plan_id=None):
        try:
            summary = get_plan_expense_summary(plan_id=plan_id, user=request.user)
        except LedgerNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except LedgerPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        return Response(ExpenseSummarySerializer(summary).data)

    @extend_schema(responses={200: UserDebtSerializer(many=True)})
    def debts(self, request, plan_id=None):
        try:
            debts = get_user_debts(plan_id=plan_id, user=request.user)
        except LedgerNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except LedgerPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        return Response(UserDebtSerializer(debts, many=True).data)

    @extend_schema(responses={200: SettlementPlanSerializer})
    def settlements(self, request, plan_id=None):
        try:
            settlement_plan = get_settlement_plan(plan_id=plan_id, user=request.user)
        except LedgerNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except LedgerPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        return Response(SettlementPlanSerializer(settlement_plan).data)


class ExpenseViewSet(viewsets.GenericViewSet):
    """
    Single-expense operations.

    retrieve: Get an expense with its shares
    partial_update: Edit an expense (payer only)
    destroy: Delete an expense (payer or plan owner)
    settle: Confirm a member's share as paid (payer only)
    """

    permission_classes = [IsAuthenticated]
    serializer_class = ExpenseSerializer

    def retrieve(self, request, pk=None):
        try:
            expense = get_expense(expense_id=pk, user=request.user)
        except LedgerNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except LedgerPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        return Response(ExpenseSerializer(expense).data)

    @extend_schema(request=ExpenseUpdateSerializer, responses={200: ExpenseSerializer})
    def partial_update(self, request, pk=None):
        serializer = ExpenseUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            expense = update_expense(
                expense_id=pk,
                requester=request.user,
                **serializer.validated_data
            )
        except LedgerValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except LedgerNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except LedgerPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except LedgerConflictError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)

        return Response(ExpenseSerializer(expense).data)

    def destroy(self, request, pk=None):
        try:
            delete_expense(expense_id=pk, requester=request.user)
        except LedgerNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except LedgerPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: ExpenseShareSerializer})
    def settle(self, request, pk=None, user_id=None):
        try:
            share = settle_share(expense_id=pk, share_user_id=user_id, requester=request.user)
        except LedgerNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except LedgerPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except LedgerConflictError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        return Response(ExpenseShareSerializer(share).data)
