from django.urls import path
from .views import branch_resolve, profile_draft

urlpatterns = [
    path('branches/resolve/<str:identifier>/', branch_resolve, name='branch-resolve'),
    path('profile/draft/', profile_draft, name='profile-draft'),
]
