"""
Tests for houses, categories, roster and admin API endpoints.
"""
import json

from housepoints.extensions import db
from housepoints.models import House


def _award(client, headers_for, teacher, student, category):
    return client.post('/api/points', headers=headers_for(teacher), data=json.dumps({
        'student_id': student.id,
        'category_id': category.id,
    }))


class TestHousesApi:
    """Tests for standings and reconciliation routes."""

    def test_standings_ranked(self, client, headers_for, sample_teacher, sample_student, sample_category, sample_house, other_house):
        _award(client, headers_for, sample_teacher, sample_student, sample_category)

        response = client.get('/api/houses', headers=headers_for(sample_student))
        assert response.status_code == 200
        houses = response.get_json()['houses']
        assert [(h['name'], h['points'], h['rank']) for h in houses] == [
            ('Phoenix', 5, 1),
            ('Griffin', 0, 2),
        ]

    def test_standings_repair_drift(self, app, client, headers_for, sample_teacher, sample_student, sample_category, sample_house):
        _award(client, headers_for, sample_teacher, sample_student, sample_category)
        house = db.session.get(House, sample_house.id)
        house.points = 99
        db.session.commit()

        response = client.get('/api/houses', headers=headers_for(sample_teacher))
        assert response.get_json()['houses'][0]['points'] == 5

    def test_reconcile_endpoint(self, client, headers_for, sample_teacher, sample_house):
        response = client.post(f'/api/houses/{sample_house.id}/reconcile', headers=headers_for(sample_teacher))
        assert response.status_code == 200
        assert response.get_json() == {
            'house_id': sample_house.id,
            'previous_cached': 0,
            'recomputed': 0,
            'corrected': False,
        }

    def test_reconcile_unknown_house(self, client, headers_for, sample_teacher):
        response = client.post('/api/houses/99999/reconcile', headers=headers_for(sample_teacher))
        assert response.status_code == 404

    def test_create_house_admin_only(self, client, headers_for, sample_admin, sample_teacher):
        body = json.dumps({'name': 'Dragon', 'color': '#388E3C'})
        assert client.post('/api/houses', headers=headers_for(sample_teacher), data=body).status_code == 403

        response = client.post('/api/houses', headers=headers_for(sample_admin), data=body)
        assert response.status_code == 201
        assert response.get_json()['points'] == 0

    def test_duplicate_house(self, client, headers_for, sample_admin, sample_house):
        response = client.post('/api/houses', headers=headers_for(sample_admin), data=json.dumps({
            'name': 'Phoenix', 'color': '#000000'
        }))
        assert response.status_code == 409

    def test_assign_students_reconciles(self, client, headers_for, sample_teacher, sample_student, sample_category, sample_house, other_house):
        _award(client, headers_for, sample_teacher, sample_student, sample_category)

        response = client.post(
            f'/api/houses/{other_house.id}/assign-students',
            headers=headers_for(sample_teacher),
            data=json.dumps({'student_ids': [sample_student.id]})
        )
        assert response.status_code == 200
        totals = {r['house_id']: r['recomputed'] for r in response.get_json()['reconciled']}
        assert totals == {sample_house.id: 0, other_house.id: 5}

    def test_classes(self, client, headers_for, sample_admin, sample_house):
        created = client.post('/api/classes', headers=headers_for(sample_admin), data=json.dumps({
            'name': '7C', 'house_id': sample_house.id
        }))
        assert created.status_code == 201

        listing = client.get('/api/classes', headers=headers_for(sample_admin))
        assert [c['name'] for c in listing.get_json()['classes']] == ['7C']


class TestCategoriesApi:
    """Tests for /api/behavior-categories."""

    def test_list_positive_first(self, client, headers_for, sample_teacher, sample_category, negative_category):
        response = client.get('/api/behavior-categories', headers=headers_for(sample_teacher))
        assert response.status_code == 200
        names = [c['name'] for c in response.get_json()['categories']]
        assert names == ['Academic Excellence', 'Tardiness']

    def test_create_category(self, client, headers_for, sample_admin):
        response = client.post('/api/behavior-categories', headers=headers_for(sample_admin), data=json.dumps({
            'name': 'Kindness',
            'point_value': 2,
            'is_positive': True,
        }))
        assert response.status_code == 201

        listing = client.get('/api/behavior-categories', headers=headers_for(sample_admin))
        assert [c['name'] for c in listing.get_json()['categories']] == ['Kindness']

    def test_create_category_requires_boolean_sign(self, client, headers_for, sample_admin):
        response = client.post('/api/behavior-categories', headers=headers_for(sample_admin), data=json.dumps({
            'name': 'Kindness',
            'point_value': 2,
            'is_positive': 'yes',
        }))
        assert response.status_code == 400


class TestRosterApi:
    """Tests for /api/users."""

    def test_list_students(self, client, headers_for, sample_teacher, sample_student, second_student, sample_class):
        response = client.get(f'/api/users/students?class_id={sample_class.id}', headers=headers_for(sample_teacher))
        assert response.status_code == 200
        assert response.get_json()['count'] == 2

    def test_guardian_lists_own_children(self, client, headers_for, sample_guardian, sample_student):
        response = client.get(f'/api/users/students/parent/{sample_guardian.id}', headers=headers_for(sample_guardian))
        assert response.status_code == 200
        assert [s['id'] for s in response.get_json()['students']] == [sample_student.id]

    def test_student_cannot_list_roster(self, client, headers_for, sample_student):
        response = client.get('/api/users/students', headers=headers_for(sample_student))
        assert response.status_code == 403

    def test_update_roster(self, client, headers_for, sample_teacher, sample_student, other_house):
        response = client.patch(
            f'/api/users/students/{sample_student.id}/roster',
            headers=headers_for(sample_teacher),
            data=json.dumps({'house_id': other_house.id, 'section': 'B'})
        )
        assert response.status_code == 200
        data = response.get_json()
        assert data['house_id'] == other_house.id
        assert data['section'] == 'B'

    def test_roster_move_carries_points_at_next_standings(self, client, headers_for, sample_teacher, sample_student, sample_category, sample_house, other_house):
        _award(client, headers_for, sample_teacher, sample_student, sample_category)

        client.patch(
            f'/api/users/students/{sample_student.id}/roster',
            headers=headers_for(sample_teacher),
            data=json.dumps({'house_id': other_house.id})
        )
        assert db.session.get(House, sample_house.id).points == 5

        response = client.get('/api/houses', headers=headers_for(sample_teacher))
        points = {h['name']: h['points'] for h in response.get_json()['houses']}
        assert points == {'Phoenix': 0, 'Griffin': 5}

    def test_teacher_creates_student_not_staff(self, client, headers_for, sample_teacher):
        student = client.post('/api/users', headers=headers_for(sample_teacher), data=json.dumps({
            'username': 'newkid', 'password': 'secret1', 'first_name': 'New',
            'last_name': 'Kid', 'email': 'newkid@school.test', 'role': 'student',
        }))
        assert student.status_code == 201

        staff = client.post('/api/users', headers=headers_for(sample_teacher), data=json.dumps({
            'username': 'newteacher', 'password': 'secret1', 'first_name': 'New',
            'last_name': 'Teacher', 'email': 'newteacher@school.test', 'role': 'teacher',
        }))
        assert staff.status_code == 403

    def test_create_user_unknown_class_or_house(self, client, headers_for, sample_admin, sample_house):
        body = {
            'username': 'lostkid', 'password': 'secret1', 'first_name': 'Lost',
            'last_name': 'Kid', 'email': 'lostkid@school.test', 'role': 'student',
        }
        response = client.post('/api/users', headers=headers_for(sample_admin), data=json.dumps(dict(body, class_id=99999)))
        assert response.status_code == 404
        assert response.get_json()['error']['code'] == 'CLASS_NOT_FOUND'

        response = client.post('/api/users', headers=headers_for(sample_admin), data=json.dumps(dict(body, house_id=99999)))
        assert response.status_code == 404

        response = client.post('/api/users', headers=headers_for(sample_admin), data=json.dumps(dict(body, house_id=sample_house.id)))
        assert response.status_code == 201
        assert response.get_json()['house_id'] == sample_house.id

    def test_bulk_delete_admin_only(self, client, headers_for, sample_teacher, sample_admin, sample_student):
        body = json.dumps({'student_ids': [sample_student.id]})
        assert client.post('/api/users/bulk-delete', headers=headers_for(sample_teacher), data=body).status_code == 403

        response = client.post('/api/users/bulk-delete', headers=headers_for(sample_admin), data=body)
        assert response.status_code == 200
        assert response.get_json()['deleted'] == 1


class TestAdminApi:
    """Tests for /api/admin bulk ledger routes."""

    def test_reset_requires_confirm(self, client, headers_for, sample_admin):
        response = client.post('/api/admin/points/reset', headers=headers_for(sample_admin), data=json.dumps({}))
        assert response.status_code == 400

    def test_reset(self, client, headers_for, sample_admin, sample_teacher, sample_student, sample_category, sample_house):
        _award(client, headers_for, sample_teacher, sample_student, sample_category)

        response = client.post('/api/admin/points/reset', headers=headers_for(sample_admin), data=json.dumps({
            'confirm': True
        }))
        assert response.status_code == 200
        assert response.get_json()['transactions_deleted'] == 1

        standings = client.get('/api/houses', headers=headers_for(sample_admin)).get_json()['houses']
        assert all(h['points'] == 0 for h in standings)

    def test_teacher_cannot_reset(self, client, headers_for, sample_teacher):
        response = client.post('/api/admin/points/reset', headers=headers_for(sample_teacher), data=json.dumps({
            'confirm': True
        }))
        assert response.status_code == 403

    def test_purge(self, client, headers_for, sample_admin, sample_teacher, sample_student, sample_category):
        _award(client, headers_for, sample_teacher, sample_student, sample_category)

        response = client.delete(f'/api/admin/students/{sample_student.id}/points', headers=headers_for(sample_admin))
        assert response.status_code == 200
        assert response.get_json()['points_removed'] == 5
