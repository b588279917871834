from rest_framework import status
from rest_framework.test import APITestCase
from django.core.cache import cache

from apps.authentication.models import User
from apps.campaigns.models import Campaign


class CampaignApiTest(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username='testuser', email='test@example.com', password='testpass123', tenant_id=1
        )
        self.client.force_authenticate(user=self.user)
        self.campaign = Campaign.objects.create(
            tenant_id=1, name='Roundup', leads=100, cases=5, revenue=10000, ad_spend=2500,
            case_payout_amount=2000,
        )
        Campaign.objects.create(tenant_id=2, name='Other tenant')

    def test_list_is_tenant_scoped(self):
        response = self.client.get('/api/v1/campaigns/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['name'] for c in response.data], ['Roundup'])

    def test_create_assigns_tenant(self):
        response = self.client.post('/api/v1/campaigns/', {'name': 'Hair Relaxer', 'platform': 'google'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Campaign.objects.get(name='Hair Relaxer').tenant_id, 1)

    def test_duplicate_name_in_tenant(self):
        response = self.client.post('/api/v1/campaigns/', {'name': 'Roundup'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('already exists', response.data['error'])

    def test_other_tenant_campaign_is_hidden(self):
        other = Campaign.objects.get(name='Other tenant')
        response = self.client.get(f'/api/v1/campaigns/{other.pk}/metrics/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_metrics(self):
        response = self.client.get(f'/api/v1/campaigns/{self.campaign.pk}/metrics/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        metrics = response.data['metrics']
        self.assertEqual(metrics['cost_per_lead'], 25.0)
        self.assertEqual(metrics['cpa'], 500.0)
        self.assertEqual(metrics['roi'], 400.0)
        self.assertEqual(metrics['performance'], 'Excellent')

    def test_projection_uses_campaign_history(self):
        response = self.client.post(
            f'/api/v1/campaigns/{self.campaign.pk}/projection/', {'targetProfit': 3000}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        projection = response.data['projection']
        # 5% conversion at $25 per lead: 20 leads ($500) per $2000 case
        self.assertEqual(projection['required_cases'], 2)
        self.assertEqual(projection['required_leads'], 40)
        self.assertEqual(projection['days'], 30)

    def test_projection_rejects_zero_conversion(self):
        response = self.client.post(
            f'/api/v1/campaigns/{self.campaign.pk}/projection/', {'conversionRate': 0}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'conversionRate must be greater than 0')


class FormDraftApiTest(APITestCase):
    def setUp(self):
        cache.clear()
        self.user = User.objects.create_user(
            username='drafter', email='drafter@example.com', password='testpass123', tenant_id=1
        )
        self.client.force_authenticate(user=self.user)
        self.url = '/api/v1/campaigns/drafts/new-campaign/'

    def test_empty_draft(self):
        response = self.client.get(self.url)
        self.assertEqual(response.data, {'success': True, 'data': None})

    def test_put_get_delete(self):
        response = self.client.put(self.url, {'data': {'name': 'Roundup', 'budget': 500}}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['lastSaved'])

        self.client.put(self.url, {'data': {'budget': 750}}, format='json')
        response = self.client.get(self.url)
        self.assertEqual(response.data['data'], {'name': 'Roundup', 'budget': 750})

        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertIsNone(self.client.get(self.url).data['data'])

    def test_drafts_are_per_user(self):
        self.client.put(self.url, {'data': {'name': 'Mine'}}, format='json')
        other = User.objects.create_user(
            username='someone', email='someone@example.com', password='testpass123', tenant_id=1
        )
        self.client.force_authenticate(user=other)
        self.assertIsNone(self.client.get(self.url).data['data'])
