"""Root URL configuration for the Wildlife CMS API."""
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView

urlpatterns = [
    path("auth/", include("authentication.urls")),
    path("", include("authentication.user_urls")),
    path("", include("articles.urls")),
    path("upload/", include("media.urls")),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
]
