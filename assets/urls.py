from django.urls import path
from .views import DeleteImageAPIView, DeleteVideoAPIView, DeleteImageBatchAPIView

urlpatterns = [
    path('delete/image', DeleteImageAPIView.as_view(), name='cloudinary-delete-image'),
    path('delete/video', DeleteVideoAPIView.as_view(), name='cloudinary-delete-video'),
    path('delete/batch', DeleteImageBatchAPIView.as_view(), name='cloudinary-delete-batch'),
]
