from rest_framework import serializers
from .models import Product


def _required(label):
    return {'required': f'Missing required field: {label}', 'null': f'Missing required field: {label}'}


class ProductSerializer(serializers.ModelSerializer):
    """
    Wire format of a catalog product. Field names are camelCase, the
    identifier is exposed as ``_id``.
    """
    _id = serializers.CharField(source='product_id', read_only=True)
    sku = serializers.CharField(max_length=64, error_messages=_required('sku'))
    productName = serializers.CharField(source='product_name', max_length=255,
                                        error_messages=_required('productName'))
    description = serializers.CharField(required=False, allow_blank=True)
    oldPrice = serializers.DecimalField(source='old_price', max_digits=10, decimal_places=2,
                                        min_value=0, required=False, allow_null=True,
                                        coerce_to_string=False)
    newPrice = serializers.DecimalField(source='new_price', max_digits=10, decimal_places=2,
                                        coerce_to_string=False,
                                        error_messages=_required('newPrice'))
    stock = serializers.IntegerField(error_messages=_required('stock'))
    mainCategory = serializers.CharField(source='main_category', required=False, allow_blank=True)
    subCategory = serializers.CharField(source='sub_category', required=False, allow_blank=True)
    sizes = serializers.ListField(child=serializers.CharField(), required=False)
    colors = serializers.ListField(child=serializers.CharField(), required=False)
    tags = serializers.ListField(child=serializers.CharField(), required=False)
    images = serializers.ListField(
        child=serializers.JSONField(),
        allow_empty=False,
        error_messages={
            'required': 'At least one product image is required',
            'empty': 'At least one product image is required',
            'not_a_list': 'At least one product image is required',
        },
    )
    videos = serializers.ListField(child=serializers.JSONField(), required=False)
    status = serializers.ChoiceField(choices=Product.STATUS_CHOICES, required=False,
                                     error_messages={'invalid_choice': 'Invalid status value'})
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Product
        fields = (
            '_id', 'sku', 'productName', 'description', 'oldPrice', 'newPrice', 'stock',
            'mainCategory', 'subCategory', 'sizes', 'colors', 'tags', 'images', 'videos',
            'status', 'createdAt', 'updatedAt',
        )

    def validate_newPrice(self, value):
        if value <= 0:
            raise serializers.ValidationError('Price must be greater than 0')
        return value

    def validate_stock(self, value):
        if value < 0:
            raise serializers.ValidationError('Stock cannot be negative')
        return value

    def validate(self, attrs):
        # check the invariant against the stored values on partial updates
        new_price = attrs.get('new_price', getattr(self.instance, 'new_price', None))
        if 'old_price' in attrs:
            old_price = attrs['old_price']
        else:
            old_price = getattr(self.instance, 'old_price', None)
        if old_price is not None and new_price is not None and old_price < new_price:
            raise serializers.ValidationError({'oldPrice': 'Old price must be greater than new price'})
        return attrs


class ProductStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=Product.STATUS_CHOICES,
        error_messages={
            'required': 'Invalid status value',
            'invalid_choice': 'Invalid status value',
            'null': 'Invalid status value',
        },
    )


class WishlistProductSerializer(serializers.ModelSerializer):
    _id = serializers.CharField(source='product_id', read_only=True)
    productName = serializers.CharField(source='product_name')
    oldPrice = serializers.DecimalField(source='old_price', max_digits=10, decimal_places=2,
                                        coerce_to_string=False)
    newPrice = serializers.DecimalField(source='new_price', max_digits=10, decimal_places=2,
                                        coerce_to_string=False)

    class Meta:
        model = Product
        fields = ('_id', 'sku', 'productName', 'oldPrice', 'newPrice', 'stock', 'images', 'status')
