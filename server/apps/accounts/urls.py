"""URL routes for accounts app."""

from django.urls import path

from server.apps.accounts import views

urlpatterns = [
    path('register', views.RegisterView.as_view(), name='register'),
    path('login', views.LoginView.as_view(), name='login'),
    path('me', views.MeView.as_view(), name='me'),
]
