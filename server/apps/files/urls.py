"""URL routes for files app."""

from django.urls import path

from server.apps.files import views

urlpatterns = [
    path('files', views.FileListCreateView.as_view(), name='file-list'),
    path(
        'files/<str:file_id>',
        views.FileDetailView.as_view(),
        name='file-detail',
    ),
    path(
        'files/<str:file_id>/download',
        views.FileDownloadView.as_view(),
        name='file-download',
    ),
    path(
        'storage/remaining',
        views.RemainingStorageView.as_view(),
        name='storage-remaining',
    ),
]
