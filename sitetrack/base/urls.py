from django.urls import path

from sitetrack.base import views

urlpatterns = [
    path('', views.index_view, name='index'),
]
