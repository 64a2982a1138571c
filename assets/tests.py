from unittest import mock

from cloudinary.exceptions import Error as CloudinaryError
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

CLOUDINARY = {'cloud_name': 'demo', 'api_key': '1234', 'api_secret': 'shh'}


@override_settings(CLOUDINARY=CLOUDINARY)
class DeleteMediaTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()

    @mock.patch('assets.media.uploader.destroy', return_value={'result': 'ok'})
    def test_delete_image(self, destroy):
        response = self.client.delete('/api/cloudinary/delete/image', {'publicId': 'products/aby-001'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['message'], 'Image deleted successfully from Cloudinary')
        destroy.assert_called_once_with('products/aby-001', invalidate=True, resource_type='image')

    @mock.patch('assets.media.uploader.destroy', return_value={'result': 'not found'})
    def test_delete_missing_image_is_not_an_error(self, _destroy):
        response = self.client.delete('/api/cloudinary/delete/image', {'publicId': 'gone'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['message'], 'Image not found (may already be deleted)')

    @mock.patch('assets.media.uploader.destroy')
    def test_public_id_is_required(self, destroy):
        response = self.client.delete('/api/cloudinary/delete/image', {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], 'Public ID is required')
        destroy.assert_not_called()

    @mock.patch('assets.media.uploader.destroy', return_value={'result': 'error'})
    def test_refused_delete(self, _destroy):
        response = self.client.delete('/api/cloudinary/delete/video', {'publicId': 'clip'})
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.json()['message'], 'Failed to delete video')

    @mock.patch('assets.media.uploader.destroy', side_effect=CloudinaryError('Invalid Signature'))
    def test_provider_error(self, _destroy):
        response = self.client.delete('/api/cloudinary/delete/image', {'publicId': 'x'})
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertFalse(response.json()['success'])

    @mock.patch('assets.media.uploader.destroy', return_value={'result': 'ok'})
    def test_delete_video(self, destroy):
        response = self.client.delete('/api/cloudinary/delete/video', {'publicId': 'clip'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        destroy.assert_called_once_with('clip', invalidate=True, resource_type='video')

    @mock.patch('assets.media.cloudinary_api.delete_resources')
    def test_batch_delete(self, delete_resources):
        delete_resources.return_value = {'deleted': {'a': 'deleted', 'b': 'deleted'}}
        response = self.client.post('/api/cloudinary/delete/batch', {'publicIds': ['a', 'b', 'c']})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body['deletedCount'], 2)
        self.assertEqual(body['totalRequested'], 3)
        self.assertEqual(body['message'], '2 images deleted successfully')

    def test_batch_needs_ids(self):
        response = self.client.post('/api/cloudinary/delete/batch', {'publicIds': []})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], 'Public IDs array is required')


@override_settings(CLOUDINARY={'cloud_name': '', 'api_key': '', 'api_secret': ''})
class UnconfiguredMediaHostTestCase(TestCase):
    @mock.patch('assets.media.uploader.destroy')
    def test_missing_credentials(self, destroy):
        response = APIClient().delete('/api/cloudinary/delete/image', {'publicId': 'x'})
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.json()['message'], 'Cloudinary configuration error')
        destroy.assert_not_called()
