from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from resume_processor.services.openai_service import OpenAIService
from .serializers import AskSerializer, QueryRecordSerializer
from .services.query_service import ResumeQueryService
from .services.resume_search_service import ResumeSearchService


@api_view(['POST'])
def ask_question(request):
    """
    Answer a question about the uploaded resumes.

    Request Body:
        query: The question to answer
        resume_id: (Optional) Only use this resume as context
    """
    serializer = AskSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    query_service = ResumeQueryService(OpenAIService())
    result = query_service.answer_query(
        serializer.validated_data['query'],
        resume_id=serializer.validated_data.get('resume_id'),
    )
    return Response({
        "answer": result.answer,
        "context": result.context,
    })


@api_view(['GET'])
def recent_queries(request):
    """
    List the most recent questions and answers, newest first.

    Query Parameters:
        limit: Maximum number of records to return (default: 10)
    """
    try:
        limit = int(request.query_params.get('limit', '10'))
    except ValueError:
        limit = 10

    queries = ResumeQueryService(OpenAIService()).get_recent_queries(limit=limit)
    return Response(QueryRecordSerializer(queries, many=True).data)


@api_view(['GET'])
def search_chunks(request):
    """
    Search resume chunks semantically similar to the provided text.

    Query Parameters:
        q: The text to search for
        resume_id: (Optional) Only search this resume
        limit: Maximum number of results to return (default: 5)
    """
    query = request.query_params.get('q', '')
    if not query:
        return Response(
            {"error": "q parameter is required"},
            status=status.HTTP_400_BAD_REQUEST
        )

    try:
        limit = int(request.query_params.get('limit', '5'))
    except ValueError:
        limit = 5

    try:
        search_service = ResumeSearchService(OpenAIService())
        results = search_service.search_chunks_by_semantic(
            query,
            resume_id=request.query_params.get('resume_id') or None,
            limit=limit,
        )

        return Response({
            "query": query,
            "results_count": len(results),
            "results": results
        })

    except Exception as e:
        return Response(
            {"error": f"Error performing semantic search: {str(e)}"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
