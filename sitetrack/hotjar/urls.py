from django.urls import path

from sitetrack.hotjar import views

urlpatterns = [
    path('hotjar/hotjar.script.js', views.snippet_view, name='hotjar_snippet'),
]
