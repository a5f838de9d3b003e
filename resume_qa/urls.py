from django.urls import path
from .views import ask_question, recent_queries, search_chunks

urlpatterns = [
    path('queries/ask/', ask_question, name='query-ask'),
    path('queries/recent/', recent_queries, name='query-recent'),
    path('queries/search/', search_chunks, name='chunk-semantic-search'),
]
