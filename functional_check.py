"""Functional endpoint-by-endpoint verification script.
Run inside the virtual environment:
  python functional_check.py
Outputs tuple of (status_code, heuristic_content_ok) per route.
"""

import time

from app import create_app
from services.session_helper import SESSION_KEY


def _current(c):
    """Return (correct_answer, choices) for the problem stored in the test client's session."""
    from models import Problem

    with c.session_transaction() as sess:
        data = sess[SESSION_KEY]
    return Problem.from_dict(data["problem"]).correct_answer, data["choices"]


def run_checks(feedback_wait=1.05):
    app = create_app({"TESTING": True, "WTF_CSRF_ENABLED": False})
    results = {}
    with app.test_client() as c:
        # Home
        r = c.get("/")
        results["home"] = (r.status_code, "options-grid" in r.get_data(as_text=True))

        # State
        s = c.get("/quiz/state")
        state = s.get_json() or {}
        results["state"] = (s.status_code, len(state.get("view", {}).get("choices", [])) == 4)

        # Wrong answer: same problem after the feedback delay
        answer, choices = _current(c)
        wrong = next(v for v in choices if v != answer)
        w = c.post("/quiz/select", json={"choice": wrong})
        wj = w.get_json() or {}
        results["select_wrong"] = (w.status_code, wj.get("outcome") == "wrong")

        locked = c.post("/quiz/select", json={"choice": answer})
        results["select_locked"] = (locked.status_code, locked.status_code == 409)

        time.sleep(feedback_wait)
        rs = c.post("/quiz/resolve")
        rj = rs.get_json() or {}
        results["resolve_wrong"] = (
            rs.status_code,
            not rj.get("locked") and rj.get("question_index") == 1 and _current(c)[0] == answer,
        )

        # Correct answer: advances to question 2
        ok = c.post("/quiz/select", json={"choice": answer})
        results["select_correct"] = (ok.status_code, (ok.get_json() or {}).get("outcome") == "correct")
        time.sleep(feedback_wait)
        adv = c.post("/quiz/resolve")
        results["advance"] = (adv.status_code, (adv.get_json() or {}).get("question_index") == 2)

        # Bad input
        bad = c.post("/quiz/select", json={"choice": "abc"})
        results["bad_choice"] = (bad.status_code, bad.status_code == 400)

        # Restart
        rst = c.post("/quiz/restart")
        results["restart"] = (rst.status_code, (rst.get_json() or {}).get("question_index") == 1)

        # Health
        h = c.get("/healthz")
        results["healthz"] = (h.status_code, (h.get_json() or {}).get("status") == "ok")

        # 404
        nf = c.get("/this-page-does-not-exist")
        results["404"] = (nf.status_code, nf.status_code == 404)

    return results


if __name__ == "__main__":
    for name, (status, ok) in run_checks().items():
        print(f"{name:16} {status} {'OK' if ok else 'FAIL'}")
