import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.utils import timezone
from .models import AuditLog
from .permissions import IsAdminRole, is_admin_user
from .responses import success_response, error_response, validation_error_response, paginate
from .serializers import (
    UserSerializer, UserCreateSerializer, ProfileUpdateSerializer,
    ChangePasswordSerializer, AuditLogSerializer
)

logger = logging.getLogger('pgmanager.core')

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    default_error_messages = {
        'no_active_account': 'Invalid credentials',
    }

    def validate(self, attrs):
        # Emails are stored lowercased at registration
        attrs[self.username_field] = attrs[self.username_field].strip().lower()
        data = super().validate(attrs)
        self.user.last_login_at = timezone.now()
        self.user.save(update_fields=['last_login_at'])
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['role'] = user.role
        token['full_name'] = user.full_name
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    """Login with email and password"""
    serializer_class = CustomTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        logger.info(f"User {request.data.get('email')} logged in")
        return success_response({
            'user': response.data['user'],
            'access': response.data['access'],
            'refresh': response.data['refresh'],
        }, message='Login successful')


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh serializer that handles deleted users gracefully"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        return success_response(response.data)


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    required = ['email', 'password', 'full_name', 'phone']
    if any(not request.data.get(field) for field in required):
        return error_response('Email, password, full name, and phone are required')

    if User.objects.filter(email__iexact=request.data.get('email')).exists():
        logger.warning(f"Registration rejected: {request.data.get('email')} already exists")
        return error_response('User with this email already exists')

    serializer = UserCreateSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Registration validation failed: {serializer.errors}")
        return validation_error_response(serializer.errors)

    user = serializer.save()
    token = CustomTokenObtainPairSerializer.get_token(user)
    logger.info(f"User {user.email} registered with role {user.role}")
    return success_response({
        'user': UserSerializer(user).data,
        'access': str(token.access_token),
        'refresh': str(token),
    }, message='User registered successfully', status_code=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
def logout(request):
    """Stateless logout; the client discards its tokens"""
    return success_response(message='Logout successful')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get current user profile"""
    user_data = UserSerializer(request.user).data
    user_data['is_admin'] = is_admin_user(request.user)
    user_data['properties'] = list(
        request.user.properties.values('id', 'name', 'city', 'total_floors', 'total_rooms', 'total_beds')
    )
    return success_response(user_data)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def update_profile(request):
    """Update full name and phone of the current user"""
    serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)
    serializer.save()
    logger.info(f"User {request.user.email} updated profile")
    return success_response(UserSerializer(request.user).data, message='Profile updated successfully')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password(request):
    """Change password after verifying the current one"""
    if not request.data.get('current_password') or not request.data.get('new_password'):
        return error_response('Current password and new password are required')

    serializer = ChangePasswordSerializer(data=request.data)
    if not serializer.is_valid():
        return validation_error_response(serializer.errors)

    user = request.user
    if not user.check_password(serializer.validated_data['current_password']):
        logger.warning(f"User {user.email} supplied wrong current password")
        return error_response('Current password is incorrect')

    user.set_password(serializer.validated_data['new_password'])
    user.save()
    logger.info(f"User {user.email} changed password")
    return success_response(message='Password changed successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def audit_log_list(request):
    """List audit logs with filters"""
    logs = AuditLog.objects.select_related('user').all()

    action = request.query_params.get('action')
    if action:
        logs = logs.filter(action=action)

    model_name = request.query_params.get('model')
    if model_name:
        logs = logs.filter(model_name=model_name)

    property_id = request.query_params.get('property_id')
    if property_id:
        logs = logs.filter(property_id=property_id)

    date_from = request.query_params.get('date_from')
    if date_from:
        logs = logs.filter(created_at__date__gte=date_from)

    date_to = request.query_params.get('date_to')
    if date_to:
        logs = logs.filter(created_at__date__lte=date_to)

    items, pagination = paginate(logs, request, default_limit=50)
    return success_response({
        'logs': AuditLogSerializer(items, many=True).data,
        'pagination': pagination,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    log = get_object_or_404(AuditLog, pk=pk)
    return success_response(AuditLogSerializer(log).data)
