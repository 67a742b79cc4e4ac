from django.shortcuts import render


def index_view(request):
    return render(request, 'index.html')


def handler404(request, exception):
    # DO NOT DISPLAY request.path without using urllib.parse.quote() first
    return render(request, '404.html', status=404)
