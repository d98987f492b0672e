import unittest

from woo_reservations.services import metadata_normalizer
from woo_reservations.tests.factories import meta


class TestDateAndTime(unittest.TestCase):
    def test_normalize_date_reverses_day_month_year(self):
        self.assertEqual(metadata_normalizer.normalize_date("25/12/2023"), "2023-12-25")
        self.assertEqual(metadata_normalizer.normalize_date("5/1/2024"), "2024-01-05")

    def test_normalize_date_rejects_impossible_day(self):
        with self.assertRaises(ValueError):
            metadata_normalizer.normalize_date("32/01/2023")
        with self.assertRaises(ValueError):
            metadata_normalizer.normalize_date("29/02/2023")

    def test_normalize_time(self):
        self.assertEqual(metadata_normalizer.normalize_time("14:30"), "14:30")
        self.assertEqual(metadata_normalizer.normalize_time("07:05:59"), "07:05")

    def test_normalize_time_accepts_twelve_hour_clock(self):
        self.assertEqual(metadata_normalizer.normalize_time("2:30 PM"), "14:30")
        self.assertEqual(metadata_normalizer.normalize_time("08:00 am"), "08:00")
        self.assertEqual(metadata_normalizer.normalize_time("12:15:30 am"), "00:15")
        self.assertEqual(metadata_normalizer.normalize_time("12:45 pm"), "12:45")

    def test_normalize_time_rejects_out_of_range(self):
        with self.assertRaises(ValueError):
            metadata_normalizer.normalize_time("13:00 PM")
        with self.assertRaises(ValueError):
            metadata_normalizer.normalize_time("25:00")


class TestNormalizeLineItem(unittest.TestCase):
    def test_every_label_maps_to_one_canonical_entry(self):
        cases = [
            ("SKU", "TOUR-1", "_sku", "TOUR-1"),
            ("Adults", "2", "_adults", "2"),
            ("Adultos", "3", "_adults", "3"),
            ("Children", "1", "_kids", "1"),
            ("Niños", "0", "_kids", "0"),
            ("Description", "Combo", "_combo_description", "Combo"),
            ("Descripción", "Paquete", "_combo_description", "Paquete"),
            ("Quantity", "4", "_combo_quantity", "4"),
            ("Cantidad", "5", "_combo_quantity", "5"),
            ("Pick-up Place", "Hotel", "_need_transportation", "Hotel"),
            ("Lugar de Reunión", "Lobby", "_need_transportation", "Lobby"),
            ("Pick-up Schedule", "08:15", "_transportation_schedules", "08:15"),
            ("Hora de Salida", "09:00", "_transportation_schedules", "09:00"),
            ("Tour Date", "25/12/2023", "_tour_date", "2023-12-25"),
            ("Fecha de la Actividad", "01/02/2024", "_tour_date", "2024-02-01"),
            ("Tour Schedule", "14:30", "_tour_schedule", "14:30"),
            ("Horario de la Actividad", "16:45", "_tour_schedule", "16:45"),
            ("Pick-up Address", "Calle 1", "_address", "Calle 1"),
            ("Domicilio", "Av. 2", "_address", "Av. 2"),
            ("Pick-up Location", "Centro", "_location", "Centro"),
            ("Ubicación", "Playa", "_location", "Playa"),
        ]
        for display_key, value, canonical_key, expected in cases:
            with self.subTest(display_key=display_key):
                line_item = {"meta_data": [meta(display_key, value)]}
                metadata_normalizer.normalize_line_item(line_item)

                derived = [m for m in line_item["meta_data"] if m["key"] == canonical_key]
                self.assertEqual(len(derived), 1)
                self.assertEqual(derived[0]["display_key"], canonical_key)
                self.assertEqual(derived[0]["value"], expected)
                self.assertEqual(derived[0]["display_value"], expected)

    def test_labels_are_case_sensitive(self):
        line_item = {"meta_data": [meta("adults", "2"), meta("TOUR DATE", "25/12/2023")]}
        applied = metadata_normalizer.normalize_line_item(line_item)
        self.assertEqual(applied, [])
        self.assertEqual(len(line_item["meta_data"]), 2)

    def test_legacy_labels_are_accepted(self):
        line_item = {"meta_data": [meta("Activity Date", "10/03/2024"), meta("Horario de la actividad", "10:00")]}
        metadata_normalizer.normalize_line_item(line_item)
        values = {m["key"]: m["value"] for m in line_item["meta_data"]}
        self.assertEqual(values["_tour_date"], "2024-03-10")
        self.assertEqual(values["_tour_schedule"], "10:00")

    def test_derived_entries_follow_originals(self):
        line_item = {"meta_data": [meta("Adults", "2"), meta("Color", "red"), meta("Children", "1")]}
        metadata_normalizer.normalize_line_item(line_item)
        self.assertEqual(
            [m["key"] for m in line_item["meta_data"]],
            ["adults", "color", "children", "_adults", "_kids"],
        )

    def test_invalid_date_is_logged_and_skipped(self):
        line_item = {"meta_data": [meta("Tour Date", "32/01/2023"), meta("Adults", "2")]}
        with self.assertLogs("woo_reservations.services.metadata_normalizer", level="WARNING") as logs:
            metadata_normalizer.normalize_line_item(line_item)

        keys = [m["key"] for m in line_item["meta_data"]]
        self.assertNotIn("_tour_date", keys)
        self.assertIn("_adults", keys)
        self.assertIn("32/01/2023", logs.output[0])

    def test_non_string_time_is_logged_as_unexpected(self):
        line_item = {"meta_data": [meta("Tour Schedule", None)]}
        with self.assertLogs("woo_reservations.services.metadata_normalizer", level="ERROR"):
            applied = metadata_normalizer.normalize_line_item(line_item)
        self.assertEqual(applied, [])

    def test_repeated_normalization_does_not_duplicate(self):
        line_item = {"meta_data": [meta("SKU", "TOUR-1"), meta("Tour Date", "25/12/2023")]}
        metadata_normalizer.normalize_line_item(line_item)
        metadata_normalizer.normalize_line_item(line_item)

        keys = [m["key"] for m in line_item["meta_data"]]
        self.assertEqual(keys.count("_sku"), 1)
        self.assertEqual(keys.count("_tour_date"), 1)
        self.assertEqual(len(keys), 4)

    def test_twelve_hour_schedule_is_derived(self):
        line_item = {"meta_data": [meta("Tour Schedule", "2:30 PM"), meta("Hora de Salida", "08:00 am")]}
        metadata_normalizer.normalize_line_item(line_item)
        values = {m["key"]: m["value"] for m in line_item["meta_data"]}
        self.assertEqual(values["_tour_schedule"], "14:30")
        self.assertEqual(values["_transportation_schedules"], "08:00")

    def test_storefront_entry_sharing_canonical_key_is_kept(self):
        source = {"key": "_adults", "value": "2", "display_key": "Adultos", "display_value": "2"}
        line_item = {"meta_data": [dict(source)]}

        metadata_normalizer.normalize_line_item(line_item)

        self.assertEqual(line_item["meta_data"][0], source)
        self.assertEqual(line_item["meta_data"][1], metadata_normalizer.canonical_entry("_adults", "2"))
        self.assertEqual(len(line_item["meta_data"]), 2)

    def test_each_matching_label_appends_its_own_entry(self):
        line_item = {"meta_data": [meta("Adults", "2"), meta("Adultos", "3")]}

        applied = metadata_normalizer.normalize_line_item(line_item)

        adults = [m["value"] for m in line_item["meta_data"] if m["key"] == "_adults"]
        self.assertEqual(adults, ["2", "3"])
        self.assertEqual(len(applied), 2)

    def test_redelivery_replaces_only_derived_entries(self):
        line_item = {"meta_data": [meta("Adults", "2"), meta("Adultos", "3")]}
        metadata_normalizer.normalize_line_item(line_item)
        line_item["meta_data"][0]["value"] = "4"

        metadata_normalizer.normalize_line_item(line_item)

        self.assertEqual(
            [(m["key"], m["value"]) for m in line_item["meta_data"]],
            [("adults", "4"), ("adultos", "3"), ("_adults", "4"), ("_adults", "3")],
        )

    def test_line_item_without_meta_data(self):
        self.assertEqual(metadata_normalizer.normalize_line_item({"product_id": 3}), [])


if __name__ == "__main__":
    unittest.main()
