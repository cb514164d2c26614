from django.urls import path
from .views import backup_restore, backup_run, backup_settings

urlpatterns = [
    path('backups/settings/', backup_settings, name='backup-settings'),
    path('backups/run/', backup_run, name='backup-run'),
    path('backups/<str:pk>/restore/', backup_restore, name='backup-restore'),
]
