import unittest
from unittest import mock

import app as app_module
from sections import Section


def course(code, *sections):
    return {"courseCode": code, "courseName": f"{code} name", "sections": list(sections)}


class ApiTests(unittest.TestCase):
    def setUp(self):
        self.client = app_module.app.test_client()

    def post(self, body):
        return self.client.post("/api/schedules", json=body)

    def test_default_constraints(self):
        res = self.client.get("/api/constraints/defaults")
        self.assertEqual(res.status_code, 200)
        data = res.get_json()
        self.assertEqual(data["earliestStart"], "07:30")
        self.assertEqual(data["latestEnd"], "16:30")
        self.assertFalse(data["allowFull"])
        self.assertEqual(data["maxSchedules"], 20)

    def test_generates_schedules(self):
        body = {
            "courses": [
                course(
                    "CS101",
                    {"group": 1, "schedule": "MW 10:00 AM - 11:30 AM", "enrolled": "15/30"},
                    {"group": 2, "schedule": "TTh 10:00 AM - 11:30 AM", "enrolled": "30/30"},
                ),
                course(
                    "MATH2",
                    {"group": 1, "schedule": "MW 01:00 PM - 02:30 PM", "enrolled_current": 12, "enrolled_total": 25},
                ),
            ],
            "constraints": {"allowFull": True, "maxFullPerSchedule": 1},
        }
        res = self.post(body)
        self.assertEqual(res.status_code, 200)
        data = res.get_json()
        self.assertEqual(data["count"], 2)
        first = data["schedules"][0]
        self.assertEqual([s["group"] for s in first["selections"]], [1, 1])
        self.assertEqual(first["selections"][0]["courseCode"], "CS101")
        self.assertEqual(first["selections"][1]["enrolled"], "12/25")
        self.assertEqual(first["meta"]["latestEnd"], 870)
        self.assertEqual(data["schedules"][1]["meta"]["fullCount"], 1)
        self.assertEqual(data["schedules"][1]["selections"][0]["status"], "FULL")

    def test_sort_and_filter_views(self):
        body = {
            "courses": [
                course(
                    "CS101",
                    {"group": 1, "schedule": "MW 02:00 PM - 03:30 PM", "enrolled": "30/30"},
                    {"group": 2, "schedule": "MW 08:00 AM - 09:30 AM", "enrolled": "15/30"},
                ),
            ],
            "constraints": {"allowFull": True},
            "sort": "earliest",
        }
        data = self.post(body).get_json()
        self.assertEqual([s["selections"][0]["group"] for s in data["schedules"]], [2, 1])

        body["sort"] = "fewestFull"
        data = self.post(body).get_json()
        self.assertEqual([s["meta"]["fullCount"] for s in data["schedules"]], [0, 1])

        body["sort"] = "best"
        body["filter"] = "hasFull"
        data = self.post(body).get_json()
        self.assertEqual(data["count"], 1)
        self.assertEqual(data["schedules"][0]["selections"][0]["group"], 1)

    def test_no_schedules_reports_unresolvable_pairs(self):
        body = {
            "courses": [
                course("A", {"group": 1, "schedule": "MW 10:00 AM - 11:30 AM", "enrolled": "15/30"}),
                course("B", {"group": 1, "schedule": "MW 11:00 AM - 12:30 PM", "enrolled": "15/30"}),
            ]
        }
        res = self.post(body)
        self.assertEqual(res.status_code, 200)
        data = res.get_json()
        self.assertEqual(data["error"], "No valid schedules found")
        self.assertEqual(data["schedules"], [])
        self.assertEqual(data["unresolvablePairs"], [["A", "B"]])

    def test_bad_payloads_are_400(self):
        good_section = {"group": 1, "schedule": "MW 10:00 AM - 11:30 AM", "enrolled": "15/30"}
        for body in [
            {},
            {"courses": []},
            {"courses": "CS101"},
            {"courses": [{"courseCode": "X"}]},
            {"courses": [course("X", {"group": "one", "schedule": "MW 10:00 AM - 11:30 AM"})]},
            {"courses": [course("X", {"group": 1, "schedule": "MW 10:00 AM - 11:30 AM", "enrolled": "lots"})]},
            {"courses": [course("X", good_section)], "constraints": {"earliestStart": "17:00"}},
            {"courses": [course("X", good_section)], "constraints": ["nope"]},
            {"courses": [course("X", good_section)], "sort": "random"},
            {"courses": [course("X", good_section)], "filter": "weird"},
            {"courses": [course("X", good_section)], "constraints": {"allowFull": "false"}},
            {"courses": [course("X", good_section)], "constraints": {"allowAtRisk": "no"}},
            {"courses": [course("X", {"group": 1, "schedule": "MW 10:00 AM - 11:30 AM"})]},
            {"courses": [course("X", {"group": 1, "schedule": "MW 10:00 AM - 11:30 AM", "enrolled": 15})]},
            {"courses": [course("X", {"group": 1, "schedule": "MW 10:00 AM - 11:30 AM", "enrolledCurrent": 15})]},
        ]:
            with self.subTest(body=body):
                res = self.post(body)
                self.assertEqual(res.status_code, 400)
                self.assertIn("error", res.get_json())

    def test_budget_exhaustion_is_reported_as_timeout(self):
        body = {
            "courses": [
                course("A", {"group": 1, "schedule": "MW 10:00 AM - 11:30 AM", "enrolled": "15/30"}),
                course("B", {"group": 1, "schedule": "TTh 10:00 AM - 11:30 AM", "enrolled": "15/30"}),
            ]
        }
        with mock.patch.object(app_module.CONFIG, "max_steps", 1):
            res = self.post(body)
        self.assertEqual(res.status_code, 200)
        data = res.get_json()
        self.assertTrue(data["timedOut"])
        self.assertEqual(data["schedules"], [])


class AdapterTests(unittest.TestCase):
    def test_field_aliases_are_normalized(self):
        raw = {"section_group": 3, "raw_schedule": "F 09:00 AM - 10:00 AM", "enrolledCurrent": 4, "enrolledTotal": 10}
        sec = app_module.section_from_payload(raw, {"course_code": "BIO1", "course_name": "Biology"})
        self.assertEqual(
            sec,
            Section(3, "F 09:00 AM - 10:00 AM", 4, 10, course_code="BIO1", course_name="Biology"),
        )

    def test_section_level_course_code_wins(self):
        raw = {"group": 1, "schedule": "F 09:00 AM - 10:00 AM", "enrolled": "1/2", "courseCode": "OVR"}
        sec = app_module.section_from_payload(raw, {"courseCode": "BIO1"})
        self.assertEqual(sec.course_code, "OVR")

    def test_missing_enrollment_is_not_defaulted(self):
        for raw in [
            {"group": 1, "schedule": "F 09:00 AM - 10:00 AM"},
            {"group": 1, "schedule": "F 09:00 AM - 10:00 AM", "enrolled": 15},
            {"group": 1, "schedule": "F 09:00 AM - 10:00 AM", "enrolled_total": 30},
        ]:
            with self.subTest(raw=raw):
                with self.assertRaises(app_module.PayloadError):
                    app_module.section_from_payload(raw, {"courseCode": "BIO1"})

    def test_earliest_view_sorts_by_latest_end(self):
        courses = [[
            Section(1, "MW 02:00 PM - 03:30 PM", 15, 30),
            Section(2, "MW 08:00 AM - 09:30 AM", 15, 30),
            Section(3, "TTh 10:00 AM - 11:30 AM", 15, 30),
        ]]
        found = app_module.generate_schedules(courses, app_module.Constraints())
        view = app_module.apply_view(found, "all", "earliest")
        self.assertEqual([c.selections[0].group_id for c in view], [2, 3, 1])


if __name__ == "__main__":
    unittest.main()
