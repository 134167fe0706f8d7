import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.address import AddressSet, Coordinate
from models.schedule import (
    ScheduleConfigurator,
    ScheduleSwitches,
    validate_schedule_data,
    get_day_number,
    DIRECTION_ROUND_TRIP,
    CADENCE_SMOOTH,
    DAY_MODE_WEEKDAY_SPLIT,
    ERROR_NO_TIME,
)
from services.schedule_service import derive, derive_plan, EDITABLE_ROLES

FROM = {"id": "f", "type": "from", "address": "Home", "coordinate": {"lat": 40.3777, "lng": 49.8920}}
STOP1 = {"id": "s1", "type": "stop", "address": "School", "coordinate": {"lat": 40.39, "lng": 49.88}}
STOP2 = {"id": "s2", "type": "stop", "address": "Gym", "coordinate": {"lat": 40.40, "lng": 49.87}}
TO = {"id": "t", "type": "to", "address": "Office", "coordinate": {"lat": 40.4093, "lng": 49.8671}}


def schedule(direction="oneWay", cadence="fixed", day_mode="daily", **times):
    configurator = ScheduleConfigurator(switches=ScheduleSwitches(direction, cadence, day_mode))
    for bucket, slots in times.items():
        for index, value in slots.items():
            configurator.set_time(index, value, bucket)
    return configurator


class TestContainerCount(unittest.TestCase):
    def test_length_for_every_stop_count_and_direction(self):
        for stops in ([], [STOP1], [STOP1, STOP2]):
            for direction, extra in (("oneWay", 0), ("roundTrip", 1)):
                address_set = AddressSet.from_entries([FROM, *stops, TO])
                containers = derive(address_set, schedule(direction))
                self.assertEqual(len(containers), 2 + len(stops) + extra)
                self.assertEqual([c.index for c in containers], list(range(len(containers))))

    def test_round_trip_with_two_stops(self):
        address_set = AddressSet.from_entries([FROM, STOP1, STOP2, TO])
        containers = derive(address_set, schedule(DIRECTION_ROUND_TRIP))

        self.assertEqual(
            [c.role for c in containers],
            ["origin", "stop", "stop", "destination", "return"]
        )
        self.assertEqual(containers[4].address, containers[0].address)
        self.assertEqual(containers[4].from_coordinate, Coordinate(40.4093, 49.8671))
        self.assertEqual(containers[4].to_coordinate, Coordinate(40.3777, 49.8920))


class TestMissingEndpoints(unittest.TestCase):
    def test_no_placeholders_for_missing_destination(self):
        containers = derive(AddressSet.from_entries([FROM, STOP1]), schedule())
        self.assertEqual([c.role for c in containers], ["origin", "stop"])

    def test_return_address_falls_back_to_destination(self):
        containers = derive(AddressSet.from_entries([TO]), schedule(DIRECTION_ROUND_TRIP))
        self.assertEqual([c.role for c in containers], ["destination", "return"])
        self.assertEqual(containers[1].address, "Office")

    def test_return_address_empty_without_endpoints(self):
        containers = derive(AddressSet.from_entries([STOP1]), schedule(DIRECTION_ROUND_TRIP))
        self.assertEqual([c.role for c in containers], ["stop", "return"])
        self.assertEqual(containers[1].address, "")

    def test_empty_address_set(self):
        self.assertEqual(derive(AddressSet(), schedule()), [])


class TestEditability(unittest.TestCase):
    def test_only_outer_legs_are_editable(self):
        address_set = AddressSet.from_entries([FROM, STOP1, STOP2, TO])
        for direction in ("oneWay", "roundTrip"):
            for container in derive(address_set, schedule(direction)):
                self.assertEqual(container.editable, container.role in EDITABLE_ROLES)

    def test_deterministic(self):
        address_set = AddressSet.from_entries([FROM, STOP1, TO])
        configurator = schedule(DIRECTION_ROUND_TRIP, fixed={0: "08:00"})
        self.assertEqual(derive(address_set, configurator), derive(address_set, configurator))


class TestTimeInheritance(unittest.TestCase):
    def test_stops_inherit_from_preceding_editable(self):
        address_set = AddressSet.from_entries([FROM, STOP1, STOP2, TO])
        containers = derive(address_set, schedule(fixed={0: "08:00", 3: "09:30"}))

        self.assertEqual(containers[0].time, "08:00")
        self.assertFalse(containers[0].is_calculated)
        self.assertEqual(containers[1].time, "08:00")
        self.assertTrue(containers[1].is_calculated)
        self.assertEqual(containers[2].time, "08:00")
        self.assertEqual(containers[3].time, "09:30")

    def test_unresolved_when_nothing_assigned_before(self):
        address_set = AddressSet.from_entries([FROM, STOP1, TO])
        containers = derive(address_set, schedule(fixed={2: "09:30"}))

        self.assertIsNone(containers[0].time)
        self.assertIsNone(containers[1].time)
        self.assertTrue(containers[1].is_undetermined)
        self.assertFalse(containers[1].is_calculated)
        self.assertEqual(containers[2].time, "09:30")

    def test_times_on_stop_slots_are_ignored(self):
        address_set = AddressSet.from_entries([FROM, STOP1, TO])
        containers = derive(address_set, schedule(fixed={1: "07:00"}))
        self.assertIsNone(containers[1].time)

    def test_stop_without_coordinates_stays_undetermined(self):
        stop = {"id": "s1", "type": "stop", "address": "Unknown"}
        address_set = AddressSet.from_entries([FROM, stop, STOP2, TO])
        containers = derive(address_set, schedule(fixed={0: "08:00"}))

        self.assertFalse(containers[1].on_route)
        self.assertIsNone(containers[1].time)
        # The second stop's incoming coordinate is its own, so it is on route
        self.assertTrue(containers[2].on_route)
        self.assertEqual(containers[2].time, "08:00")

    def test_unlocated_next_stop_falls_back_to_destination(self):
        stop = {"id": "s2", "type": "stop", "address": "Unknown"}
        address_set = AddressSet.from_entries([FROM, STOP1, stop, TO])
        containers = derive(address_set, schedule(fixed={0: "08:00"}))

        self.assertEqual(containers[1].to_coordinate, Coordinate(40.4093, 49.8671))
        self.assertTrue(containers[1].on_route)
        self.assertEqual(containers[1].time, "08:00")
        self.assertIsNone(containers[2].time)
        # Destination leg starts at the last stop, else at the origin
        self.assertEqual(containers[3].from_coordinate, Coordinate(40.3777, 49.8920))

    def test_unlocated_first_stop_leaves_origin_leg_to_destination(self):
        stop = {"id": "s1", "type": "stop", "address": "Unknown"}
        containers = derive(AddressSet.from_entries([FROM, stop, TO]), schedule())
        self.assertEqual(containers[0].to_coordinate, Coordinate(40.4093, 49.8671))

    def test_stop_before_unlocated_destination_stays_undetermined(self):
        to = {"id": "t", "type": "to", "address": "Office"}
        address_set = AddressSet.from_entries([FROM, STOP1, to])
        containers = derive(address_set, schedule(fixed={0: "08:00"}))
        self.assertIsNone(containers[1].time)

    def test_weekday_split_buckets(self):
        address_set = AddressSet.from_entries([FROM, STOP1, TO])
        configurator = schedule(
            day_mode=DAY_MODE_WEEKDAY_SPLIT,
            weekday={0: "07:30"},
            weekend={0: "10:00"},
        )
        plan = derive_plan(address_set, configurator)

        self.assertEqual(list(plan), ["weekday", "weekend"])
        self.assertEqual(plan["weekday"][1].time, "07:30")
        self.assertEqual(plan["weekend"][1].time, "10:00")

    def test_smooth_ignores_day_mode(self):
        configurator = schedule(cadence=CADENCE_SMOOTH, day_mode=DAY_MODE_WEEKDAY_SPLIT, fixed={0: "06:45"})
        self.assertEqual(configurator.active_buckets(), ("fixed",))
        self.assertEqual(configurator.switches.day_mode, DAY_MODE_WEEKDAY_SPLIT)

        containers = derive(AddressSet.from_entries([FROM, TO]), configurator)
        self.assertEqual(containers[0].time, "06:45")


class TestScheduleConfigurator(unittest.TestCase):
    def test_legacy_switch_states(self):
        configurator = ScheduleConfigurator.from_dict({
            "switchStates": {"switch1": True, "switch2": False, "switch3": True},
            "weekdayTimes": {"0": "07:00"},
            "selectedDays": ["mon", "sun"],
        })

        self.assertTrue(configurator.switches.is_round_trip)
        self.assertTrue(configurator.switches.is_weekday_split)
        self.assertEqual(configurator.time_for(0), "07:00")
        self.assertEqual(configurator.day_numbers(), [0, 1])

    def test_round_trip_through_dict(self):
        configurator = schedule(DIRECTION_ROUND_TRIP, fixed={2: "18:00"})
        restored = ScheduleConfigurator.from_dict(configurator.to_dict())
        self.assertEqual(restored, configurator)

    def test_clearing_a_slot(self):
        configurator = schedule(fixed={0: "08:00"})
        configurator.set_time(0, "")
        self.assertFalse(configurator.has_any_time())

    def test_unknown_bucket(self):
        with self.assertRaises(ValueError):
            schedule().set_time(0, "08:00", "holiday")

    def test_day_number_mapping(self):
        self.assertEqual(get_day_number("sun"), 0)
        self.assertEqual(get_day_number("sat"), 6)
        self.assertEqual(get_day_number("nope"), 0)


class TestValidateScheduleData(unittest.TestCase):
    def test_requires_a_time(self):
        result = validate_schedule_data({"switches": {"direction": "oneWay"}})
        self.assertFalse(result["isValid"])
        self.assertEqual(result["errors"], [ERROR_NO_TIME])

    def test_any_bucket_counts(self):
        self.assertTrue(validate_schedule_data({"weekendTimes": {"1": "11:15"}})["isValid"])

    def test_malformed_time_and_day(self):
        result = validate_schedule_data({"fixedTimes": {"0": "25:00"}, "selectedDays": ["funday"]})
        self.assertEqual(len(result["errors"]), 2)


if __name__ == "__main__":
    unittest.main()
