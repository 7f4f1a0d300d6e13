import json
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase
from django.urls import reverse

from apps.projects.models import Project
from apps.tasks.models import Category, Task

from .factories import at, make_category, make_project, make_task, make_user


class ApiTestCase(TestCase):

    def setUp(self):
        self.user = make_user()
        self.other = make_user(email='other@example.com')
        self.client.force_login(self.user)

    def send(self, method, url, data=None):
        return getattr(self.client, method)(
            url,
            data=json.dumps(data) if data is not None else '',
            content_type='application/json',
        )


class HealthTests(TestCase):

    def test_health_needs_no_auth(self):
        response = self.client.get(reverse('health'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'ok')


class EnvelopeTests(ApiTestCase):

    def test_success_envelope(self):
        response = self.client.get(reverse('reports:overview'))
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['code'], 200)
        self.assertEqual(body['message'], 'success')
        self.assertIn('timestamp', body)
        self.assertNotIn('error', body)
        self.assertEqual(body['data']['total_tasks'], 0)

    def test_anonymous_requests_get_401(self):
        self.client.logout()
        response = self.client.get(reverse('reports:overview'))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['code'], 401)

    def test_wrong_method_gets_405(self):
        response = self.client.post(reverse('reports:daily'))
        self.assertEqual(response.status_code, 405)
        self.assertEqual(response['Allow'], 'GET')

    def test_foreign_record_is_404(self):
        task = make_task(self.other)
        response = self.client.get(reverse('tasks:task_detail', args=[task.pk]))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['code'], 404)

    def test_malformed_json_is_400(self):
        response = self.client.post(
            reverse('tasks:task_list'), data='{not json', content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('error', response.json())

    def test_store_failure_is_an_opaque_500(self):
        with patch('apps.reports.aggregates.count_tasks', side_effect=DatabaseError('boom')):
            response = self.client.get(reverse('reports:overview'))
        self.assertEqual(response.status_code, 500)
        body = response.json()
        self.assertEqual(body['code'], 500)
        self.assertEqual(body['error'], 'DatabaseError')
        self.assertNotIn('data', body)


class StatsApiTests(ApiTestCase):

    def test_daily_defaults_and_lenient_days(self):
        url = reverse('reports:daily')
        self.assertEqual(len(self.client.get(url).json()['data']), 7)
        self.assertEqual(len(self.client.get(url, {'days': 'abc'}).json()['data']), 7)
        self.assertEqual(len(self.client.get(url, {'days': '999'}).json()['data']), 7)
        self.assertEqual(len(self.client.get(url, {'days': '3'}).json()['data']), 3)

    def test_weekly(self):
        data = self.client.get(reverse('reports:weekly'), {'weeks': 2}).json()['data']
        self.assertEqual(len(data), 2)
        self.assertEqual(set(data[0]), {'week_label', 'tasks_created', 'tasks_completed'})

    def test_productivity(self):
        make_task(self.user, status=Task.Status.COMPLETED)
        data = self.client.get(reverse('reports:productivity')).json()['data']
        self.assertEqual(data['overview']['completion_rate'], 100.0)
        self.assertEqual(len(data['recent_productivity']), 7)

    def test_monthly(self):
        data = self.client.get(reverse('reports:monthly'), {'month': '2024-02'}).json()['data']
        self.assertEqual(data['month'], '2024-02')
        self.assertEqual(len(data['daily_trends']), 29)

    def test_monthly_rejects_malformed_month(self):
        for month in ('2024-13', 'bad'):
            with self.subTest(month=month):
                response = self.client.get(reverse('reports:monthly'), {'month': month})
                self.assertEqual(response.status_code, 400)
                body = response.json()
                self.assertEqual(body['code'], 400)
                self.assertIn('YYYY-MM', body['error'])


class TaskApiTests(ApiTestCase):

    def test_create_starts_pending(self):
        category = make_category(self.user)
        response = self.send('post', reverse('tasks:task_list'), {
            'title': 'Write report',
            'priority': 'high',
            'category_id': category.pk,
            'due_date': '2024-03-20T09:00:00Z',
        })
        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertEqual(data['status'], 'pending')
        self.assertIsNone(data['completed_at'])
        self.assertEqual(data['priority'], 'high')
        self.assertEqual(data['category']['name'], 'Work')

    def test_create_defaults_priority(self):
        response = self.send('post', reverse('tasks:task_list'), {'title': 'Plain'})
        self.assertEqual(response.json()['data']['priority'], 'medium')

    def test_create_rejects_foreign_category_and_project(self):
        foreign_category = make_category(self.other)
        foreign_project = make_project(self.other)
        for payload in ({'category_id': foreign_category.pk}, {'project_id': foreign_project.pk}):
            with self.subTest(payload=payload):
                response = self.send(
                    'post', reverse('tasks:task_list'), {'title': 'Sneaky', **payload}
                )
                self.assertEqual(response.status_code, 400)
        self.assertFalse(Task.objects.filter(title='Sneaky').exists())

    def test_create_requires_title(self):
        response = self.send('post', reverse('tasks:task_list'), {'description': 'no title'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('title', response.json()['error'])

    def test_update(self):
        task = make_task(self.user, title='Old')
        response = self.send('put', reverse('tasks:task_detail', args=[task.pk]), {
            'title': 'New',
            'priority': 'urgent',
        })
        self.assertEqual(response.status_code, 200)
        task.refresh_from_db()
        self.assertEqual(task.title, 'New')
        self.assertEqual(task.priority, Task.Priority.URGENT)

    def test_delete(self):
        task = make_task(self.user)
        response = self.client.delete(reverse('tasks:task_detail', args=[task.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Task.objects.filter(pk=task.pk).exists())

    def test_status_change_keeps_completed_at_consistent(self):
        task = make_task(self.user)
        url = reverse('tasks:task_status', args=[task.pk])

        self.send('patch', url, {'status': 'completed'})
        task.refresh_from_db()
        self.assertEqual(task.status, Task.Status.COMPLETED)
        first_stamp = task.completed_at
        self.assertIsNotNone(first_stamp)

        self.send('patch', url, {'status': 'completed'})
        task.refresh_from_db()
        self.assertEqual(task.completed_at, first_stamp)

        self.send('patch', url, {'status': 'in_progress'})
        task.refresh_from_db()
        self.assertEqual(task.status, Task.Status.IN_PROGRESS)
        self.assertIsNone(task.completed_at)

    def test_status_change_rejects_unknown_status(self):
        task = make_task(self.user)
        response = self.send('patch', reverse('tasks:task_status', args=[task.pk]), {
            'status': 'done',
        })
        self.assertEqual(response.status_code, 400)

    def test_batch_status_only_touches_own_tasks(self):
        mine = [make_task(self.user), make_task(self.user)]
        theirs = make_task(self.other)

        response = self.send('patch', reverse('tasks:batch_status'), {
            'task_ids': [mine[0].pk, mine[1].pk, theirs.pk, 99999],
            'status': 'completed',
        })
        self.assertEqual(response.json()['data']['affected_count'], 2)
        self.assertEqual(
            Task.objects.filter(owner=self.user, completed_at__isnull=False).count(), 2
        )
        theirs.refresh_from_db()
        self.assertEqual(theirs.status, Task.Status.PENDING)

    def test_batch_status_keeps_existing_completion_stamp(self):
        done = make_task(
            self.user, status=Task.Status.COMPLETED,
            created_at=at(2024, 1, 1), completed_at=at(2024, 1, 2),
        )
        self.send('patch', reverse('tasks:batch_status'), {
            'task_ids': [done.pk], 'status': 'completed',
        })
        done.refresh_from_db()
        self.assertEqual(done.completed_at, at(2024, 1, 2))

    def test_batch_status_validates_payload(self):
        response = self.send('patch', reverse('tasks:batch_status'), {
            'task_ids': 'all', 'status': 'completed',
        })
        self.assertEqual(response.status_code, 400)

    def test_batch_delete(self):
        mine = make_task(self.user)
        theirs = make_task(self.other)
        response = self.send('delete', reverse('tasks:batch_delete'), {
            'task_ids': [mine.pk, theirs.pk],
        })
        self.assertEqual(response.json()['data']['affected_count'], 1)
        self.assertTrue(Task.objects.filter(pk=theirs.pk).exists())

    def test_list_filters_and_pagination(self):
        make_task(self.user, title='alpha', status=Task.Status.COMPLETED, created_at=at(2024, 3, 1))
        make_task(self.user, title='beta', created_at=at(2024, 3, 2))
        make_task(self.user, title='gamma', created_at=at(2024, 3, 3))
        make_task(self.other, title='hidden')
        url = reverse('tasks:task_list')

        data = self.client.get(url).json()['data']
        self.assertEqual(data['total'], 3)
        self.assertEqual([t['title'] for t in data['items']], ['gamma', 'beta', 'alpha'])

        data = self.client.get(url, {'status': 'completed'}).json()['data']
        self.assertEqual([t['title'] for t in data['items']], ['alpha'])

        data = self.client.get(url, {'priority': 'nonsense'}).json()['data']
        self.assertEqual(data['total'], 3)

        data = self.client.get(url, {'keyword': 'et'}).json()['data']
        self.assertEqual([t['title'] for t in data['items']], ['beta'])

        data = self.client.get(url, {'order_by': 'title', 'order_dir': 'asc'}).json()['data']
        self.assertEqual([t['title'] for t in data['items']], ['alpha', 'beta', 'gamma'])

        data = self.client.get(url, {'page': 2, 'page_size': 2}).json()['data']
        self.assertEqual(data['total_pages'], 2)
        self.assertEqual(len(data['items']), 1)

        data = self.client.get(url, {'page': 0, 'page_size': 500}).json()['data']
        self.assertEqual((data['page'], data['page_size']), (1, 10))


class CategoryApiTests(ApiTestCase):

    def test_create_with_default_color(self):
        response = self.send('post', reverse('categories:category_list'), {'name': 'Work'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['color'], Category.DEFAULT_COLOR)

    def test_duplicate_name_is_409(self):
        make_category(self.user, name='Work')
        response = self.send('post', reverse('categories:category_list'), {'name': 'Work'})
        self.assertEqual(response.status_code, 409)

    def test_same_name_allowed_for_different_owners(self):
        make_category(self.other, name='Work')
        response = self.send('post', reverse('categories:category_list'), {'name': 'Work'})
        self.assertEqual(response.status_code, 201)

    def test_list_with_count(self):
        work = make_category(self.user, name='Work')
        make_category(self.user, name='Home')
        make_task(self.user, category=work)

        data = self.client.get(
            reverse('categories:category_list'), {'with_count': 'true'}
        ).json()['data']
        self.assertEqual(
            [(c['name'], c['task_count']) for c in data], [('Work', 1), ('Home', 0)]
        )

    def test_delete_with_tasks_needs_force(self):
        category = make_category(self.user)
        task = make_task(self.user, category=category)
        url = reverse('categories:category_detail', args=[category.pk])

        self.assertEqual(self.client.delete(url).status_code, 409)
        self.assertTrue(Category.objects.filter(pk=category.pk).exists())

        self.assertEqual(self.client.delete(f'{url}?force=true').status_code, 200)
        self.assertFalse(Category.objects.filter(pk=category.pk).exists())
        task.refresh_from_db()
        self.assertIsNone(task.category)

    def test_stats_for_empty_category(self):
        category = make_category(self.user)
        data = self.client.get(
            reverse('categories:category_stats', args=[category.pk])
        ).json()['data']
        self.assertEqual(data['total_tasks'], 0)
        self.assertEqual(data['completion_rate'], 0.0)
        self.assertEqual(data['category']['id'], category.pk)


class ProjectApiTests(ApiTestCase):

    def test_create_and_duplicate(self):
        url = reverse('projects:project_list')
        response = self.send('post', url, {'name': 'Launch', 'start_date': '2024-03-01'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['status'], Project.Status.ACTIVE)
        self.assertEqual(self.send('post', url, {'name': 'Launch'}).status_code, 409)

    def test_end_before_start_is_400(self):
        response = self.send('post', reverse('projects:project_list'), {
            'name': 'Backwards', 'start_date': '2024-03-10', 'end_date': '2024-03-01',
        })
        self.assertEqual(response.status_code, 400)

    def test_list_with_stats(self):
        project = make_project(self.user)
        make_task(self.user, project=project, status=Task.Status.COMPLETED)
        make_task(self.user, project=project)

        data = self.client.get(
            reverse('projects:project_list'), {'with_stats': 'true'}
        ).json()['data']
        item = data['items'][0]
        self.assertEqual((item['total_tasks'], item['completed_tasks']), (2, 1))
        self.assertEqual(item['progress'], 50.0)

    def test_stats_include_priorities(self):
        project = make_project(self.user)
        make_task(self.user, project=project, priority=Task.Priority.URGENT)

        data = self.client.get(
            reverse('projects:project_stats', args=[project.pk])
        ).json()['data']
        self.assertEqual(data['priority_stats'], {'low': 0, 'medium': 0, 'high': 0, 'urgent': 1})
        self.assertEqual(data['pending_tasks'], 1)

    def test_project_tasks(self):
        project = make_project(self.user)
        make_task(self.user, project=project, status=Task.Status.COMPLETED)
        make_task(self.user, project=project)
        make_task(self.user)

        url = reverse('projects:project_tasks', args=[project.pk])
        self.assertEqual(self.client.get(url).json()['data']['total'], 2)
        self.assertEqual(
            self.client.get(url, {'status': 'completed'}).json()['data']['total'], 1
        )

    def test_delete_with_tasks_needs_force(self):
        project = make_project(self.user)
        task = make_task(self.user, project=project)
        url = reverse('projects:project_detail', args=[project.pk])

        self.assertEqual(self.client.delete(url).status_code, 409)
        self.assertEqual(self.client.delete(f'{url}?force=true').status_code, 200)
        task.refresh_from_db()
        self.assertIsNone(task.project)
