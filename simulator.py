# simulator.py
import os
import random
import time

import requests

URL = os.environ.get("SIM_URL", "http://127.0.0.1:8000/api/tracking/location/")
FINISH = (float(os.environ.get("RACE_FINISH_LAT", 37.5665)), float(os.environ.get("RACE_FINISH_LNG", 126.9780)))

# runners by bib with starting coords, roughly 1-2 km out
runners = [
    {'bib': '101', 'lat': FINISH[0] + 0.012, 'lng': FINISH[1] + 0.004},
    {'bib': '102', 'lat': FINISH[0] - 0.009, 'lng': FINISH[1] + 0.010},
    {'bib': '103', 'lat': FINISH[0] + 0.015, 'lng': FINISH[1] - 0.007},
]

def step(r):
    # drift toward the finish line with some jitter (not accurate, good enough for sim)
    r['lat'] += (FINISH[0] - r['lat']) * 0.05 + (random.random() - 0.5) / 5000.0
    r['lng'] += (FINISH[1] - r['lng']) * 0.05 + (random.random() - 0.5) / 5000.0
    payload = {'bib': r['bib'], 'lat': r['lat'], 'lng': r['lng']}
    try:
        resp = requests.post(URL, json=payload, timeout=5)
        print("POST", payload, resp.status_code, resp.text)
    except requests.RequestException as e:
        print("ERR", e)

if __name__ == "__main__":
    while True:
        for rr in runners:
            step(rr)
        time.sleep(2)
