from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status

from . import dependencies
from .auth_utils import authenticate_request, require_owner
from .exceptions import InvalidRequest
from .pagination import parse_page_params
from .services import BlogService, DonationRequestService, FundingService, UserService


def user_service():
    return UserService(dependencies.get_store())


def donation_request_service():
    return DonationRequestService(dependencies.get_store())


def blog_service():
    return BlogService(dependencies.get_store())


def funding_service():
    return FundingService(dependencies.get_store(), dependencies.get_payment_gateway())


def created_or_ok(created):
    return status.HTTP_201_CREATED if created else status.HTTP_200_OK


class HomeView(APIView):
    def get(self, request):
        return Response("Hello from Server..")


# ==========================================
#  USERS
# ==========================================

class UsersView(APIView):
    def post(self, request):
        user, created = user_service().register(request.data)
        if not created:
            return Response({"message": "User already exists"})
        return Response(
            {"acknowledged": True, "insertedId": user['_id']},
            status=status.HTTP_201_CREATED,
        )

    def get(self, request):
        page, limit = parse_page_params(request.query_params)
        return Response(user_service().list(page, limit).as_dict())

    def patch(self, request):
        email = request.query_params.get('email')
        if not email:
            raise InvalidRequest("Email is required")
        user_service().update_by_email(email, request.data)
        return Response({"message": "User updated successfully"})


class UserByEmailView(APIView):
    @authenticate_request
    def get(self, request):
        email = request.query_params.get('email')
        if not email:
            raise InvalidRequest("Email is required")
        # Users can only read their own document
        require_owner(request.token_email, email)
        return Response(user_service().find_by_email(email))


class UserRoleView(APIView):
    @authenticate_request
    def get(self, request, email):
        require_owner(request.token_email, email)
        return Response(user_service().find_role_by_email(email))


class DonorSearchView(APIView):
    def get(self, request):
        params = request.query_params
        donors = user_service().search_donors(
            blood_group=params.get('bloodGroup'),
            district=params.get('district'),
            upazila=params.get('upazila'),
        )
        return Response(donors)


# ==========================================
#  DONATION REQUESTS
# ==========================================

class DonationRequestsView(APIView):
    @authenticate_request
    def post(self, request):
        donation = donation_request_service().create(request.data, request.token_email)
        return Response(
            {"acknowledged": True, "insertedId": donation['_id']},
            status=status.HTTP_201_CREATED,
        )

    @authenticate_request
    def get(self, request):
        page, limit = parse_page_params(request.query_params)
        return Response(donation_request_service().list_all(page, limit).as_dict())


class MyDonationRequestsView(APIView):
    @authenticate_request
    def get(self, request):
        email = request.query_params.get('email')
        if not email:
            raise InvalidRequest("Email is required")
        return Response(donation_request_service().list_by_owner(email, request.token_email))


class DonationRequestsByStatusView(APIView):
    def get(self, request):
        return Response(donation_request_service().list_by_status(request.query_params.get('status')))


class DonationRequestDetailView(APIView):
    @authenticate_request
    def get(self, request, pk):
        return Response(donation_request_service().get(pk, request.token_email))

    @authenticate_request
    def patch(self, request, pk):
        updated = donation_request_service().update(pk, request.data, request.token_email)
        return Response({"message": "Donation request updated successfully", "donationRequest": updated})

    @authenticate_request
    def delete(self, request, pk):
        result = donation_request_service().delete(pk, request.token_email)
        return Response({"message": "Donation request deleted", **result})


# ==========================================
#  BLOGS
# ==========================================

class BlogsView(APIView):
    def post(self, request):
        blog = blog_service().create(request.data)
        return Response({"acknowledged": True, "insertedId": blog['_id']}, status=status.HTTP_201_CREATED)

    def get(self, request):
        page, limit = parse_page_params(request.query_params)
        blogs = blog_service().list(page, limit, status=request.query_params.get('status'))
        return Response(blogs.as_dict())


class BlogDetailView(APIView):
    def get(self, request, pk):
        return Response(blog_service().get(pk))


# ==========================================
#  FUNDING & PAYMENTS
# ==========================================

class FundingView(APIView):
    @authenticate_request
    def post(self, request):
        funding, created = funding_service().create(request.data, request.token_email)
        return Response(funding, status=created_or_ok(created))

    @authenticate_request
    def get(self, request):
        page, limit = parse_page_params(request.query_params)
        return Response(funding_service().list(page, limit).as_dict())


class CreateCheckoutSessionView(APIView):
    @authenticate_request
    def post(self, request):
        data = request.data if isinstance(request.data, dict) else {}
        session = funding_service().create_checkout_session(
            data.get('amount'),
            email=request.token_email,
            name=data.get('name'),
        )
        return Response(session)


class VerifyCheckoutSessionView(APIView):
    def get(self, request, session_id):
        funding, created = funding_service().verify_checkout_session(session_id)
        return Response(funding, status=created_or_ok(created))
