from rest_framework.response import Response
from rest_framework.views import APIView

from .media import MediaHost


def _body(request):
    return request.data if isinstance(request.data, dict) else {}


class DeleteImageAPIView(APIView):
    media = MediaHost()

    def delete(self, request):
        result = self.media.delete_image(_body(request).get('publicId'))
        if result.get('result') == 'not found':
            message = 'Image not found (may already be deleted)'
        else:
            message = 'Image deleted successfully from Cloudinary'
        return Response({'success': True, 'message': message, 'result': result})


class DeleteVideoAPIView(APIView):
    media = MediaHost()

    def delete(self, request):
        result = self.media.delete_video(_body(request).get('publicId'))
        return Response({'success': True, 'message': 'Video deleted successfully', 'result': result})


class DeleteImageBatchAPIView(APIView):
    media = MediaHost()

    def post(self, request):
        outcome = self.media.delete_images(_body(request).get('publicIds'))
        return Response({
            'success': True,
            'message': '%d images deleted successfully' % outcome['deletedCount'],
            **outcome,
        })
