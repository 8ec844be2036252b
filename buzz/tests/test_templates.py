import unittest

from buzz.models import HookType, TemplateCategory
from buzz.templates import (
    TEMPLATES,
    Template,
    UnknownTemplateError,
    get_template_by_code,
    get_templates_by_category,
    get_templates_by_hook_type,
    require_template,
    select_template,
    template_affinity,
)


class ZeroRandom:
    def random(self) -> float:
        return 0.0


class SequenceRandom:
    def __init__(self, values):
        self._values = list(values)

    def random(self) -> float:
        return self._values.pop(0)


class TemplateCatalogTests(unittest.TestCase):
    def test_catalog_has_thirty_unique_codes(self):
        codes = [template.code for template in TEMPLATES]
        self.assertEqual(len(codes), 30)
        self.assertEqual(len(set(codes)), 30)
        for category in TemplateCategory:
            self.assertEqual(len(get_templates_by_category(category)), 5)

    def test_lookup(self):
        self.assertEqual(get_template_by_code("URG_BREAKING").name, "緊急速報型")
        self.assertIsNone(get_template_by_code("NOPE"))
        with self.assertRaises(UnknownTemplateError) as ctx:
            require_template("NOPE")
        self.assertEqual(ctx.exception.code, "NOPE")
        self.assertEqual(str(ctx.exception), "Template not found: NOPE")

    def test_dict_round_trip_keeps_enums(self):
        template = get_template_by_code("DATA_STATS")
        data = template.to_dict()
        self.assertEqual(data["category"], "data")
        self.assertEqual(Template.from_dict(data), template)

    def test_affinity_counts_only_strong_emotions(self):
        template = get_template_by_code("URG_BREAKING")
        self.assertEqual(template_affinity(template, {"urgency": 0.8}), 30)
        self.assertEqual(template_affinity(template, {"urgency": 0.5}), 0)
        self.assertEqual(template_affinity(template, {"fomo": 0.9}), 0)


class SelectTemplateTests(unittest.TestCase):
    def test_zero_jitter_picks_first_best_in_catalog_order(self):
        self.assertEqual(select_template(HookType.SHOCK, {"urgency": 0.8}, rng=ZeroRandom()).code, "URG_BREAKING")
        self.assertEqual(select_template(HookType.SHOCK, {"trust": 0.8}, rng=ZeroRandom()).code, "DATA_STATS")
        self.assertEqual(select_template(HookType.QUESTION, {"fomo": 0.9}, rng=ZeroRandom()).code, "FOMO_MISSED")

    def test_only_matching_hook_types_compete(self):
        for hook in HookType:
            chosen = select_template(hook, {}, rng=ZeroRandom())
            self.assertEqual(chosen.hook_type, hook)
            self.assertIn(chosen, get_templates_by_hook_type(hook))

    def test_jitter_breaks_ties(self):
        candidates = get_templates_by_hook_type(HookType.EMPATHY)
        values = [0.0] * len(candidates)
        values[2] = 0.9
        chosen = select_template(HookType.EMPATHY, {}, rng=SequenceRandom(values))
        self.assertEqual(chosen, candidates[2])


if __name__ == "__main__":
    unittest.main()
