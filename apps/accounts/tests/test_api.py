import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User


# =============================================================================
# Token Tests
# =============================================================================

@pytest.mark.django_db
class TestObtainToken:
    """Tests for POST /api/auth/token/"""

    def test_obtain_token_success(self, api_client, user):
        """Valid credentials return an access/refresh pair."""
        url = reverse('users:token-obtain')
        response = api_client.post(url, {
            'email': 'testuser@example.com',
            'password': 'TestPass123!',
        })

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data
        assert 'refresh' in response.data

    def test_obtain_token_wrong_password(self, api_client, user):
        url = reverse('users:token-obtain')
        response = api_client.post(url, {
            'email': 'testuser@example.com',
            'password': 'WrongPass123!',
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_obtain_token_inactive_user(self, api_client, user_inactive):
        """Inactive users cannot obtain tokens."""
        url = reverse('users:token-obtain')
        response = api_client.post(url, {
            'email': 'inactive@example.com',
            'password': 'TestPass123!',
        })

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_refresh_token(self, api_client, user):
        obtain = api_client.post(reverse('users:token-obtain'), {
            'email': 'testuser@example.com',
            'password': 'TestPass123!',
        })

        response = api_client.post(
            reverse('users:token-refresh'),
            {'refresh': obtain.data['refresh']},
        )

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data


# =============================================================================
# Current User Tests
# =============================================================================

@pytest.mark.django_db
class TestGetCurrentUser:
    """Tests for GET /api/auth/user/"""

    def test_get_current_user(self, authenticated_client, user):
        url = reverse('users:current-user')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == user.email
        assert response.data['display_name'] == 'Test User'
        assert 'password' not in response.data

    def test_get_current_user_unauthenticated(self, api_client):
        url = reverse('users:current-user')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Model Tests
# =============================================================================

@pytest.mark.django_db
class TestUserModel:

    def test_create_user_normalizes_email(self):
        user = User.objects.create_user(email='Someone@EXAMPLE.com', password='x')
        assert user.email == 'Someone@example.com'

    def test_create_user_requires_email(self):
        with pytest.raises(ValueError):
            User.objects.create_user(email='', password='x')

    def test_display_name_falls_back_to_email_prefix(self):
        user = User.objects.create_user(email='carol@example.com', password='x')
        assert user.get_display_name() == 'carol'

    def test_create_superuser(self):
        admin = User.objects.create_superuser(email='admin@example.com', password='x')
        assert admin.is_staff is True
        assert admin.is_superuser is True
