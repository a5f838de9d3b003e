from django.contrib import admin
from .models import QueryRecord


@admin.register(QueryRecord)
class QueryRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'query', 'resume', 'created_at')
    list_filter = ('created_at',)
    search_fields = ('query', 'response')
    readonly_fields = ('query', 'response', 'resume', 'created_at')
