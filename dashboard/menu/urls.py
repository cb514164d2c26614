from dashboard.core.urls import resource_patterns

urlpatterns = resource_patterns('branches/<str:scope>/menu', 'branch-menu', {'resource': 'branch-menu'})
