from rest_framework import serializers

from products.serializers import WishlistProductSerializer


class WishlistEntrySerializer(serializers.Serializer):
    """Serializes ``(entry, product)`` pairs produced by ``WishlistStore.list``."""
    _id = serializers.SerializerMethodField()
    userId = serializers.SerializerMethodField()
    productId = serializers.SerializerMethodField()
    addedAt = serializers.SerializerMethodField()
    product = serializers.SerializerMethodField()

    def get__id(self, obj):
        return str(obj[0].pk)

    def get_userId(self, obj):
        return obj[0].user_id

    def get_productId(self, obj):
        return obj[0].product_id

    def get_addedAt(self, obj):
        return serializers.DateTimeField().to_representation(obj[0].added_at)

    def get_product(self, obj):
        return WishlistProductSerializer(obj[1]).data


class ToggleSerializer(serializers.Serializer):
    productId = serializers.CharField(error_messages={
        'required': 'Product ID is required',
        'blank': 'Product ID is required',
        'null': 'Product ID is required',
    })
