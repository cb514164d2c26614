"""
Comprehensive test suite for Catalog module
Tests: ingredients, menu categories and recipe variations through the resource API
"""
from django.test import TestCase
from rest_framework import status

from dashboard.core.registry import get_resource
from dashboard.core.test_utils import AuthenticatedAPIClient, FakeTenantBackend, TestDataFactory

INGREDIENTS_PATH = '/t/catalog/ingredients'
CATEGORIES_PATH = '/t/menu/categories'
VARIATIONS_PATH = '/t/recipe-variations'


class IngredientAPITests(TestCase):
    """Test ingredient management"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.ingredients = self.backend.seed(INGREDIENTS_PATH, [
            TestDataFactory.ingredient(name='Bread', unit='kg'),
            TestDataFactory.ingredient(name='Oat Bread', unit='kg', is_active=False),
            TestDataFactory.ingredient(name='Salt', unit='g', sku='SALT-01'),
        ])
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)
        self.url = '/api/v1/resources/ingredients/'

    def test_records_use_dashboard_fields(self):
        """Test backend uom/minThreshold/costPerUom map to record fields"""
        response = self.client.get(self.url)
        first = response.data['data']['items'][0]
        self.assertEqual(first['unit'], 'kg')
        self.assertEqual(first['min_threshold'], 5)
        self.assertEqual(first['cost_per_unit'], 2.5)
        self.assertEqual(first['status'], 'Active')

    def test_search_and_status_filter(self):
        """Test search 'bread' with status Active"""
        response = self.client.get(self.url, {'search': 'bread', 'status': 'Active'})
        self.assertEqual([r['name'] for r in response.data['data']['items']], ['Bread'])

    def test_search_by_sku_and_unit_filter(self):
        """Test sku search and free-form unit filter options"""
        response = self.client.get(self.url, {'search': 'salt-0'})
        self.assertEqual(response.data['data']['filtered_count'], 1)
        response = self.client.get(self.url, {'search': '', 'unit': 'kg'})
        self.assertEqual(response.data['data']['filtered_count'], 2)
        self.assertEqual(response.data['data']['filter_options']['unit'], ['g', 'kg'])

    def test_create_ingredient_optimistic(self):
        """Test creating an ingredient appends it without a reload"""
        self.client.get(self.url)
        response = self.client.post(self.url, {
            'name': 'Yeast', 'unit': 'g', 'min_threshold': 10, 'cost_per_unit': 0.3,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        state = response.data['data']['state']
        self.assertEqual(state['total'], 4)
        self.assertEqual(state['items'][-1]['display_id'], 4)
        self.assertEqual(len(self.backend.requests_to('GET', INGREDIENTS_PATH)), 1)

        sent = self.backend.requests_to('POST', INGREDIENTS_PATH)[0]['body']
        self.assertEqual(sent['uom'], 'g')
        self.assertEqual(sent['minThreshold'], 10)
        self.assertEqual(sent['costPerUom'], 0.3)
        self.assertTrue(sent['isActive'])

    def test_negative_numbers_rejected(self):
        """Test threshold, cost and priority must be non-negative"""
        response = self.client.post(self.url, {
            'name': 'Bad', 'unit': 'g', 'min_threshold': -1, 'cost_per_unit': -2, 'priority': -3,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('min_threshold', 'cost_per_unit', 'priority'):
            self.assertIn(field, response.data['data'])

    def test_invalid_status_rejected(self):
        """Test status outside Active/Inactive is rejected"""
        response = self.client.post(self.url, {'name': 'Bad', 'unit': 'g', 'status': 'Low'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_patches_in_place(self):
        """Test updating an ingredient keeps its display id"""
        target = self.ingredients[2]
        response = self.client.put(f"{self.url}{target['_id']}/", {
            'name': 'Sea Salt', 'unit': 'g', 'status': 'Inactive',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        record = response.data['data']['state']['items'][2]
        self.assertEqual(record['name'], 'Sea Salt')
        self.assertEqual(record['display_id'], 3)
        self.assertEqual(record['status'], 'Inactive')

    def test_delete_ingredient(self):
        """Test deleting an ingredient removes it locally and remotely"""
        target = self.ingredients[0]
        response = self.client.delete(f"{self.url}{target['_id']}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['state']['total'], 2)
        self.assertNotIn(target['_id'], self.backend.collections[INGREDIENTS_PATH])


class CategoryAPITests(TestCase):
    """Test menu category management"""

    def setUp(self):
        self.backend = FakeTenantBackend(list_style='items').install(self)
        self.backend.seed(CATEGORIES_PATH, [
            TestDataFactory.category(name='Pizza', sort_index=1),
            TestDataFactory.category(name='Drinks', sort_index=2, is_active=False),
        ])
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)
        self.url = '/api/v1/resources/categories/'

    def test_priority_maps_to_sort_index(self):
        """Test sortIndex is exposed as priority and sent back as sortIndex"""
        response = self.client.get(self.url)
        self.assertEqual([r['priority'] for r in response.data['data']['items']], [1, 2])

        self.client.post(self.url, {'name': 'Desserts', 'priority': 3}, format='json')
        sent = self.backend.requests_to('POST', CATEGORIES_PATH)[0]['body']
        self.assertEqual(sent['sortIndex'], 3)
        self.assertNotIn('priority', sent)

    def test_create_reloads_list(self):
        """Test category mutations reload the full list"""
        self.client.get(self.url)
        response = self.client.post(self.url, {'name': 'Desserts'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(self.backend.requests_to('GET', CATEGORIES_PATH)), 2)
        self.assertEqual(response.data['data']['state']['total'], 3)

    def test_status_filter(self):
        """Test filtering categories by status"""
        response = self.client.get(self.url, {'status': 'Inactive'})
        self.assertEqual([r['name'] for r in response.data['data']['items']], ['Drinks'])


class RecipeVariationAPITests(TestCase):
    """Test recipe variation management"""

    def setUp(self):
        self.backend = FakeTenantBackend().install(self)
        self.backend.seed(VARIATIONS_PATH, [
            TestDataFactory.recipe_variation(name='Large', variation_type='size', sizeMultiplier=1.5),
            TestDataFactory.recipe_variation(name='Spicy', variation_type='flavor', recipeId='r-1'),
        ])
        self.client = AuthenticatedAPIClient().authenticate_tenant(self.backend)
        self.url = '/api/v1/resources/recipe-variations/'

    def test_type_filter_and_summary(self):
        """Test filtering by variation type and the per-type summary"""
        response = self.client.get(self.url, {'type': 'size'})
        data = response.data['data']
        self.assertEqual([r['name'] for r in data['items']], ['Large'])
        self.assertEqual(data['summary']['by_type'], {'size': 1, 'flavor': 1})
        self.assertEqual(data['items'][0]['size_multiplier'], 1.5)

    def test_single_recipe_id_becomes_list(self):
        """Test a scalar recipeId is exposed as a list"""
        response = self.client.get(self.url, {'search': 'spicy'})
        self.assertEqual(response.data['data']['items'][0]['recipe_ids'], ['r-1'])

    def test_create_with_ingredient_lines(self):
        """Test ingredient lines are sent in the backend's shape"""
        response = self.client.post(self.url, {
            'name': 'Stuffed crust',
            'type': 'crust',
            'crust_type': 'stuffed',
            'ingredients': [{'source_id': 'ing-1', 'name': 'Cheese', 'quantity': 50, 'unit': 'g'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        sent = self.backend.requests_to('POST', VARIATIONS_PATH)[0]['body']
        self.assertEqual(sent['crustType'], 'stuffed')
        self.assertEqual(sent['ingredients'], [{
            'sourceType': 'inventory', 'sourceId': 'ing-1', 'nameSnapshot': 'Cheese',
            'quantity': 50.0, 'unit': 'g',
        }])
        created = response.data['data']['state']['items'][-1]
        self.assertEqual(created['ingredients'][0]['source_id'], 'ing-1')

    def test_invalid_type_and_negative_multiplier(self):
        """Test variation type and size multiplier validation"""
        response = self.client.post(self.url, {
            'name': 'Odd', 'type': 'shape', 'size_multiplier': -1,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('type', response.data['data'])
        self.assertIn('size_multiplier', response.data['data'])

    def test_crust_requires_crust_type(self):
        """Test crust variations need a crust type"""
        response = self.client.post(self.url, {'name': 'Crust', 'type': 'crust'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('crust_type', response.data['data'])


class CatalogRegistryTests(TestCase):
    """Test catalog resources are registered"""

    def test_registered(self):
        for name in ('ingredients', 'categories', 'recipe-variations'):
            self.assertEqual(get_resource(name).name, name)
