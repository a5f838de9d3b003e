from django.contrib import admin
from django.utils.text import Truncator

from .models import ChunkingProgress, Resume, ResumeChunk


class ChunkingProgressInline(admin.StackedInline):
    model = ChunkingProgress
    fields = ('position', 'chunk_index', 'is_complete', 'updated_at')
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Resume)
class ResumeAdmin(admin.ModelAdmin):
    list_display = ('filename', 'content_type', 'text_length', 'processing_status', 'chunk_count', 'uploaded_at')
    list_filter = ('content_type', 'uploaded_at')
    search_fields = ('filename', 'content')
    readonly_fields = ('id', 'filename', 'content_type', 'content', 'uploaded_at', 'processing_status')
    inlines = [ChunkingProgressInline]

    @admin.display(description="Characters")
    def text_length(self, obj):
        return len(obj.content)

    @admin.display(description="Chunks")
    def chunk_count(self, obj):
        return obj.chunks.count()


@admin.register(ResumeChunk)
class ResumeChunkAdmin(admin.ModelAdmin):
    list_display = ('resume', 'chunk_index', 'excerpt', 'created_at')
    list_select_related = ('resume',)
    search_fields = ('content', 'resume__filename')
    fields = ('resume', 'chunk_index', 'content', 'created_at')
    readonly_fields = fields

    # Chunks are written by the embedding pipeline only
    def has_add_permission(self, request):
        return False

    @admin.display(description="Content")
    def excerpt(self, obj):
        return Truncator(obj.content).chars(80)


@admin.register(ChunkingProgress)
class ChunkingProgressAdmin(admin.ModelAdmin):
    list_display = ('resume', 'position', 'chunk_index', 'is_complete', 'updated_at')
    list_filter = ('is_complete',)
    readonly_fields = ('resume', 'position', 'chunk_index', 'is_complete', 'updated_at')
