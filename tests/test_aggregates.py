import datetime

from django.test import TestCase

from apps.reports import aggregates
from apps.reports.windows import Window, daily_windows
from apps.tasks.models import Task

from .factories import NOW, at, make_category, make_project, make_task, make_user


class OwnerScopingTests(TestCase):

    def setUp(self):
        self.owner = make_user()
        self.other = make_user(email='other@example.com')

    def test_other_owners_tasks_are_never_counted(self):
        make_task(self.owner, created_at=NOW)
        make_task(self.other, created_at=NOW)
        make_task(self.other, status=Task.Status.COMPLETED, created_at=NOW)

        today = daily_windows(1, now=NOW)[0]
        self.assertEqual(aggregates.count_tasks(self.owner), 1)
        self.assertEqual(aggregates.count_created(self.owner, today), 1)
        self.assertEqual(aggregates.count_completed(self.owner, today), 0)

    def test_no_rows_counts_zero(self):
        today = daily_windows(1, now=NOW)[0]
        self.assertEqual(aggregates.count_tasks(self.owner), 0)
        self.assertEqual(aggregates.count_created(self.owner, today), 0)
        self.assertEqual(aggregates.count_overdue(self.owner, NOW), 0)


class WindowCountTests(TestCase):

    def setUp(self):
        self.owner = make_user()
        self.window = daily_windows(1, now=NOW)[0]

    def test_window_bounds_are_inclusive(self):
        make_task(self.owner, title='start', created_at=self.window.start)
        make_task(self.owner, title='end', created_at=self.window.end)
        make_task(
            self.owner, title='before',
            created_at=self.window.start - datetime.timedelta(microseconds=1),
        )
        self.assertEqual(aggregates.count_created(self.owner, self.window), 2)

    def test_completed_counts_completion_time_not_creation_time(self):
        make_task(
            self.owner, status=Task.Status.COMPLETED,
            created_at=at(2024, 3, 1), completed_at=NOW,
        )
        make_task(self.owner, created_at=NOW)

        self.assertEqual(aggregates.count_completed(self.owner, self.window), 1)
        self.assertEqual(aggregates.count_created(self.owner, self.window), 1)

    def test_filters_are_combined(self):
        make_task(self.owner, priority=Task.Priority.HIGH, created_at=NOW)
        make_task(
            self.owner, priority=Task.Priority.HIGH,
            status=Task.Status.IN_PROGRESS, created_at=NOW,
        )
        make_task(self.owner, priority=Task.Priority.LOW, created_at=NOW)

        self.assertEqual(
            aggregates.count_created(
                self.owner, self.window,
                priority=Task.Priority.HIGH, status=Task.Status.IN_PROGRESS,
            ),
            1,
        )
        self.assertEqual(aggregates.count_tasks(self.owner, priority=Task.Priority.HIGH), 2)
        self.assertEqual(aggregates.count_tasks(self.owner, priority=None), 3)

    def test_due_date_window(self):
        make_task(self.owner, due_date=at(2024, 3, 15, 18, 0))
        make_task(self.owner, due_date=at(2024, 3, 16, 9, 0))
        make_task(self.owner)

        self.assertEqual(aggregates.count_in_window(self.owner, self.window, 'due_date'), 1)

    def test_unknown_filter_is_a_programming_error(self):
        with self.assertRaises(TypeError):
            aggregates.count_tasks(self.owner, colour='red')

    def test_unknown_window_field_is_rejected(self):
        with self.assertRaises(ValueError):
            aggregates.count_in_window(self.owner, self.window, 'title')


class OverdueTests(TestCase):

    def setUp(self):
        self.owner = make_user()

    def test_only_open_tasks_past_due(self):
        make_task(self.owner, title='late', due_date=at(2024, 3, 14))
        make_task(
            self.owner, title='late in progress',
            status=Task.Status.IN_PROGRESS, due_date=at(2024, 3, 1),
        )
        make_task(
            self.owner, title='done late',
            status=Task.Status.COMPLETED, due_date=at(2024, 3, 14), created_at=at(2024, 3, 1),
        )
        make_task(self.owner, title='future', due_date=at(2024, 3, 20))
        make_task(self.owner, title='no due date')

        self.assertEqual(aggregates.count_overdue(self.owner, NOW), 2)


class DimensionTests(TestCase):

    def setUp(self):
        self.owner = make_user()

    def test_priority_rows_cover_every_priority(self):
        make_task(self.owner, priority=Task.Priority.HIGH)
        make_task(self.owner, priority=Task.Priority.HIGH, status=Task.Status.COMPLETED)

        rows = aggregates.count_by_dimension(self.owner, 'priority')
        self.assertEqual([r.key for r in rows], ['low', 'medium', 'high', 'urgent'])
        by_key = {r.key: r for r in rows}
        self.assertEqual((by_key['high'].total, by_key['high'].completed), (2, 1))
        self.assertEqual((by_key['urgent'].total, by_key['urgent'].completed), (0, 0))

    def test_priority_rows_for_empty_owner(self):
        rows = aggregates.count_by_dimension(self.owner, 'priority')
        self.assertEqual(len(rows), 4)
        self.assertTrue(all(r.total == 0 and r.completed == 0 for r in rows))

    def test_category_rows_include_empty_categories(self):
        work = make_category(self.owner, name='Work')
        make_category(self.owner, name='Home')
        make_task(self.owner, category=work)
        make_task(self.owner, category=work, status=Task.Status.COMPLETED)
        make_task(self.owner)

        rows = aggregates.count_by_dimension(self.owner, 'category')
        self.assertEqual(
            [(r.label, r.total, r.completed) for r in rows],
            [('Work', 2, 1), ('Home', 0, 0)],
        )
        self.assertEqual(rows[0].key, work.pk)

    def test_project_rows_are_owner_scoped(self):
        other = make_user(email='other@example.com')
        launch = make_project(self.owner, name='Launch')
        make_project(other, name='Secret')
        make_task(self.owner, project=launch, status=Task.Status.COMPLETED)

        rows = aggregates.count_by_dimension(self.owner, 'project')
        self.assertEqual([(r.label, r.total, r.completed) for r in rows], [('Launch', 1, 1)])

    def test_unknown_dimension(self):
        with self.assertRaises(ValueError):
            aggregates.count_by_dimension(self.owner, 'colour')


class CompletionDurationTests(TestCase):

    def test_hours_between_creation_and_completion(self):
        owner = make_user()
        make_task(
            owner, status=Task.Status.COMPLETED,
            created_at=NOW - datetime.timedelta(hours=10), completed_at=NOW,
        )
        make_task(
            owner, status=Task.Status.COMPLETED,
            created_at=NOW - datetime.timedelta(hours=2, minutes=30), completed_at=NOW,
        )
        make_task(owner)

        self.assertEqual(
            sorted(aggregates.completion_durations_hours(owner)), [2.5, 10.0]
        )

    def test_empty(self):
        self.assertEqual(aggregates.completion_durations_hours(make_user()), [])


class WindowTypeTests(TestCase):

    def test_any_window_object_with_bounds_works(self):
        owner = make_user()
        make_task(owner, created_at=at(2024, 1, 10))
        window = Window(at(2024, 1, 1, 0, 0), at(2024, 1, 31, 23, 59), 'January')
        self.assertEqual(aggregates.count_created(owner, window), 1)
