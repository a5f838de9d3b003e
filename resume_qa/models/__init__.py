from django.db import models

from resume_processor.models import Resume


class QueryRecord(models.Model):
    query = models.TextField()
    response = models.TextField()
    resume = models.ForeignKey(Resume, on_delete=models.SET_NULL, null=True, blank=True, related_name='queries')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.query[:80]
