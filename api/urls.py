from django.urls import path
from .views import (
    UsersView, UserByEmailView, UserRoleView, DonorSearchView,
    DonationRequestsView, MyDonationRequestsView, DonationRequestsByStatusView, DonationRequestDetailView,
    BlogsView, BlogDetailView,
    FundingView, CreateCheckoutSessionView, VerifyCheckoutSessionView,
)

urlpatterns = [
    # Users
    path('users', UsersView.as_view(), name='users'),
    path('users/email', UserByEmailView.as_view(), name='user-by-email'),
    path('users/<str:email>/role', UserRoleView.as_view(), name='user-role'),
    path('search-donors', DonorSearchView.as_view(), name='search-donors'),

    # Donation requests (fixed paths must come before <pk>)
    path('donation-requests', DonationRequestsView.as_view(), name='donation-requests'),
    path('donation-requests/email', MyDonationRequestsView.as_view(), name='donation-requests-by-email'),
    path('donation-requests/status', DonationRequestsByStatusView.as_view(), name='donation-requests-by-status'),
    path('donation-requests/<str:pk>', DonationRequestDetailView.as_view(), name='donation-request-detail'),

    # Blogs
    path('blogs', BlogsView.as_view(), name='blogs'),
    path('blogs/<str:pk>', BlogDetailView.as_view(), name='blog-detail'),

    # Funding & Payments
    path('funding', FundingView.as_view(), name='funding'),
    path('create-checkout-session', CreateCheckoutSessionView.as_view(), name='create-checkout-session'),
    path('verify-checkout-session/<str:session_id>', VerifyCheckoutSessionView.as_view(), name='verify-checkout-session'),
]
