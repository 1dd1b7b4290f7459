from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'funds'

# Router for ViewSets
router = DefaultRouter()
router.register(r'', views.FundViewSet, basename='fund')

urlpatterns = [
    # Fund ViewSet routes
    # GET    /api/funds/                     - List user's funds
    # POST   /api/funds/                     - Construct fund
    # GET    /api/funds/{id}/                - Get fund details (benefactors)
    # GET    /api/funds/my_allowances/       - Allowances the user receives

    # Custom fund actions
    # GET    /api/funds/{id}/benefactors/    - List benefactors
    # POST   /api/funds/{id}/deposit/        - Deposit (benefactors)
    # GET    /api/funds/{id}/allowances/     - Active allowances (?status=all)
    # POST   /api/funds/{id}/allowances/     - Create allowance (benefactors)

    # Allowance endpoints
    path('<uuid:fund_id>/allowances/<int:number>/', views.allowance_detail, name='allowance-detail'),
    path('<uuid:fund_id>/allowances/<int:number>/active/', views.allowance_active, name='allowance-active'),
    path('<uuid:fund_id>/allowances/<int:number>/approve/', views.approve, name='allowance-approve'),
    path('<uuid:fund_id>/allowances/<int:number>/withdraw/', views.withdraw, name='allowance-withdraw'),

    # Include router URLs
    path('', include(router.urls)),
]
