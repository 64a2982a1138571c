"""Deletion of uploaded product media on the media host (Cloudinary)."""
import logging

import cloudinary
from cloudinary import api as cloudinary_api
from cloudinary import uploader
from cloudinary.exceptions import Error as CloudinaryError
from django.conf import settings

from storefront.exceptions import Internal, InvalidArgument

logger = logging.getLogger(__name__)


class MediaHost:

    def configure(self):
        conf = settings.CLOUDINARY
        if not (conf.get('cloud_name') and conf.get('api_key') and conf.get('api_secret')):
            raise Internal('Cloudinary configuration error')
        cloudinary.config(secure=True, **conf)

    def _destroy(self, public_id, resource_type):
        if not public_id:
            raise InvalidArgument('Public ID is required')
        self.configure()
        try:
            result = uploader.destroy(public_id, invalidate=True, resource_type=resource_type)
        except CloudinaryError as e:
            logger.error('Cloudinary destroy of %s %s failed: %s', resource_type, public_id, e)
            raise Internal(str(e) or 'Error deleting %s from Cloudinary' % resource_type)
        outcome = result.get('result')
        if outcome not in ('ok', 'not found'):
            logger.error('Cloudinary refused to delete %s %s: %s', resource_type, public_id, result)
            raise Internal('Failed to delete %s' % resource_type)
        logger.info('Cloudinary %s %s -> %s', resource_type, public_id, outcome)
        return result

    def delete_image(self, public_id):
        return self._destroy(public_id, 'image')

    def delete_video(self, public_id):
        return self._destroy(public_id, 'video')

    def delete_images(self, public_ids):
        if not isinstance(public_ids, list) or not public_ids:
            raise InvalidArgument('Public IDs array is required')
        self.configure()
        try:
            result = cloudinary_api.delete_resources(public_ids, invalidate=True, resource_type='image')
        except CloudinaryError as e:
            logger.error('Cloudinary batch delete failed: %s', e)
            raise Internal(str(e) or 'Error batch deleting images')
        deleted = result.get('deleted') or {}
        return {
            'result': result,
            'deletedCount': len(deleted),
            'totalRequested': len(public_ids),
        }
