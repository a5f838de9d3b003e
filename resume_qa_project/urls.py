from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('resume_processor.urls')),
    path('api/', include('resume_qa.urls')),
]
