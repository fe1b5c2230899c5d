import unittest

from spotter.ai.data_uri import ImageDataUri
from spotter.ai.errors import TransportError
from spotter.ai.static import StaticClassifier
from spotter.ai.types import Classifier, SweetTreatResult
from spotter.api.actions import (
    INVALID_DATA_FORMAT_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    check_for_sweet_treat,
)


class _CountingClassifier(Classifier):
    def __init__(self, outcome: object) -> None:
        self.outcome = outcome
        self.calls: list[ImageDataUri] = []

    def classify(self, photo: ImageDataUri) -> SweetTreatResult:
        self.calls.append(photo)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome  # type: ignore[return-value]


class CheckForSweetTreatTests(unittest.TestCase):
    def test_invalid_input_never_reaches_classifier(self) -> None:
        for value in ["not-a-data-uri", "data:text/plain;base64,Zm9v", "", None, 3.14]:
            classifier = _CountingClassifier(SweetTreatResult(True))
            with self.subTest(value=value):
                result = check_for_sweet_treat(value, classifier)
                self.assertEqual(result, {"error": INVALID_DATA_FORMAT_MESSAGE})
                self.assertEqual(classifier.calls, [])

    def test_positive_verdict(self) -> None:
        classifier = StaticClassifier(is_sweet_treat=True)

        result = check_for_sweet_treat("data:image/png;base64,Zm9v", classifier)

        self.assertEqual(result, {"isSweetTreat": True})
        self.assertEqual(len(classifier.calls), 1)
        self.assertEqual(classifier.calls[0].mime_type, "image/png")

    def test_negative_verdict(self) -> None:
        classifier = StaticClassifier(is_sweet_treat=False)

        result = check_for_sweet_treat("data:image/jpeg;base64,Zm9v", classifier)

        self.assertEqual(result, {"isSweetTreat": False})

    def test_transport_failure_becomes_generic_message(self) -> None:
        classifier = _CountingClassifier(TransportError("Failed to reach Gemini API: 503"))

        result = check_for_sweet_treat("data:image/png;base64,Zm9v", classifier)

        self.assertEqual(result, {"error": UNEXPECTED_ERROR_MESSAGE})
        self.assertEqual(len(classifier.calls), 1)

    def test_unexpected_exception_text_is_not_leaked(self) -> None:
        classifier = _CountingClassifier(KeyError("secret-internal-detail"))

        result = check_for_sweet_treat("data:image/png;base64,Zm9v", classifier)

        self.assertEqual(result, {"error": UNEXPECTED_ERROR_MESSAGE})
        self.assertNotIn("secret", result["error"])

    def test_malformed_classifier_output_is_an_error(self) -> None:
        classifier = _CountingClassifier({"isSweetTreat": True})

        result = check_for_sweet_treat("data:image/png;base64,Zm9v", classifier)

        self.assertEqual(result, {"error": UNEXPECTED_ERROR_MESSAGE})

    def test_each_call_issues_one_request(self) -> None:
        classifier = StaticClassifier(is_sweet_treat=True)

        for _ in range(3):
            check_for_sweet_treat("data:image/png;base64,Zm9v", classifier)

        self.assertEqual(len(classifier.calls), 3)

    def test_result_and_error_are_exclusive(self) -> None:
        for outcome in (SweetTreatResult(True), SweetTreatResult(False), TransportError("x")):
            with self.subTest(outcome=outcome):
                result = check_for_sweet_treat(
                    "data:image/png;base64,Zm9v", _CountingClassifier(outcome)
                )
                self.assertEqual(len(result), 1)
                self.assertTrue(("error" in result) != ("isSweetTreat" in result))


if __name__ == "__main__":
    unittest.main()
