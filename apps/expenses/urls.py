from django.urls import path
from . import views

app_name = 'expenses'

plan_expense_list = views.PlanExpenseViewSet.as_view({'get': 'list', 'post': 'create'})
plan_expense_summary = views.PlanExpenseViewSet.as_view({'get': 'summary'})
plan_expense_debts = views.PlanExpenseViewSet.as_view({'get': 'debts'})
plan_expense_settlements = views.PlanExpenseViewSet.as_view({'get': 'settlements'})

expense_detail = views.ExpenseViewSet.as_view({
    'get': 'retrieve',
    'patch': 'partial_update',
    'delete': 'destroy',
})
expense_settle = views.ExpenseViewSet.as_view({'post': 'settle'})

urlpatterns = [
    # GET    /api/plans/{plan_id}/expenses/              - List plan expenses
    # POST   /api/plans/{plan_id}/expenses/              - Create expense
    # GET    /api/plans/{plan_id}/expenses/summary/      - Totals and balances
    # GET    /api/plans/{plan_id}/expenses/debts/        - My unpaid shares by creditor
    # GET    /api/plans/{plan_id}/expenses/settlements/  - Suggested transfers
    path('plans/<uuid:plan_id>/expenses/', plan_expense_list, name='plan-expense-list'),
    path('plans/<uuid:plan_id>/expenses/summary/', plan_expense_summary, name='plan-expense-summary'),
    path('plans/<uuid:plan_id>/expenses/debts/', plan_expense_debts, name='plan-expense-debts'),
    path('plans/<uuid:plan_id>/expenses/settlements/', plan_expense_settlements, name='plan-expense-settlements'),

    # GET    /api/expenses/{id}/                         - Expense details
    # PATCH  /api/expenses/{id}/                         - Edit (payer)
    # DELETE /api/expenses/{id}/                         - Delete (payer/owner)
    # POST   /api/expenses/{id}/settle/{user_id}/        - Settle a share (payer)
    path('expenses/<uuid:pk>/', expense_detail, name='expense-detail'),
    path('expenses/<uuid:pk>/settle/<uuid:user_id>/', expense_settle, name='expense-settle'),
]
